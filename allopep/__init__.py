"""
Classification of 9-mer peptides by the MHC class I allotype they associate
with, using BLOSUM62 encodings and a feed-forward neural network.
"""

from .allotype_classifier import AllotypeClassifier
from .balancing import balance, InsufficientDataError
from .common import PeptideDatasetError
from .peptide_encoding import (
    encode,
    encode_peptides,
    encode_labels,
    decode_labels,
    UnknownSymbolError,
    LabelOutOfRangeError,
)
from .pipeline import prepare_dataset, PreparedDataset
from .records import (
    normalize,
    load_records,
    RawRecord,
    NormalizedPeptide,
    MalformedRecordError,
)
from .splitting import split, InvalidRatioError

from .version import __version__

__all__ = [
    "__version__",
    "AllotypeClassifier",
    "PeptideDatasetError",
    "MalformedRecordError",
    "InsufficientDataError",
    "InvalidRatioError",
    "UnknownSymbolError",
    "LabelOutOfRangeError",
    "RawRecord",
    "NormalizedPeptide",
    "PreparedDataset",
    "normalize",
    "load_records",
    "balance",
    "split",
    "encode",
    "encode_peptides",
    "encode_labels",
    "decode_labels",
    "prepare_dataset",
]
