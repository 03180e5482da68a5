"""
End to end dataset preparation: normalize, balance, split and encode.
"""
import collections
import logging

import numpy
import pandas

from .balancing import balance, group_sizes
from .hyperparameters import HyperparameterDefaults
from .peptide_encoding import encode_peptides, encode_labels
from .records import normalize, load_records
from .splitting import split


DATASET_PREPARATION_DEFAULTS = HyperparameterDefaults(
    num_per_allotype=1000,
    train_ratio=0.8,
    balance_seed=0,
    split_seed=0,
    unknown_symbol_policy="raise")
"""
Settings for `prepare_dataset`.

num_per_allotype is the number of peptides drawn for every allotype,
train_ratio the fraction of the balanced set used for training.
unknown_symbol_policy is passed to `encode_peptides`.
"""


class PreparedDataset(collections.namedtuple(
        "PreparedDataset", [
            "x_train",
            "y_train",
            "x_test",
            "y_test",
            "train",
            "test",
            "allotype_labels",
        ])):
    """
    Encoded train and test arrays together with the peptides they came from.

    x_* have shape (n, 180) and y_* shape (n, number of allotypes). `train`
    and `test` are the SplitPeptides in the same row order.
    """
    __slots__ = ()

    def to_dataframe(self):
        """
        One row per peptide with columns peptide, label_chr, label_num and
        data_type.
        """
        return pandas.DataFrame(
            list(self.train) + list(self.test),
            columns=["peptide", "label_chr", "label_num", "data_type"])


def encode_split(records, num_classes, unknown_symbol_policy):
    (x, kept) = encode_peptides(
        [record.peptide for record in records],
        unknown_symbol_policy=unknown_symbol_policy)
    records = [records[i] for i in kept]
    y = encode_labels(
        numpy.array([record.label_num for record in records], dtype=int),
        num_classes=num_classes)
    return (x, y, records)


def prepare_dataset(record_sets, **settings):
    """
    Turn per-allotype raw records into classifier-ready arrays.

    Parameters
    ----------
    record_sets : list of (string, list of RawRecord)
        Allotype label and raw records for each allotype. The position in
        this list is the allotype index.
    **settings
        See DATASET_PREPARATION_DEFAULTS.

    Returns
    -------
    PreparedDataset
    """
    settings = DATASET_PREPARATION_DEFAULTS.with_defaults(settings)
    record_sets = list(record_sets)
    allotype_labels = [label for (label, _) in record_sets]
    if len(set(allotype_labels)) != len(allotype_labels):
        raise ValueError(
            "Duplicate allotype labels: %s" % " ".join(allotype_labels))

    normalized = []
    for (allotype_index, (label, raw_records)) in enumerate(record_sets):
        normalized.extend(normalize(raw_records, label, allotype_index))
    logging.info(
        "Normalized peptides per allotype:\n%s", group_sizes(normalized))

    balanced = balance(
        normalized,
        k=settings["num_per_allotype"],
        rng_seed=settings["balance_seed"])
    (train, test) = split(
        balanced,
        train_ratio=settings["train_ratio"],
        rng_seed=settings["split_seed"])

    (x_train, y_train, train) = encode_split(
        train, len(allotype_labels), settings["unknown_symbol_policy"])
    (x_test, y_test, test) = encode_split(
        test, len(allotype_labels), settings["unknown_symbol_policy"])

    return PreparedDataset(
        x_train=x_train,
        y_train=y_train,
        x_test=x_test,
        y_test=y_test,
        train=train,
        test=test,
        allotype_labels=allotype_labels)


def load_record_sets(label_and_paths, **read_csv_kwargs):
    """
    Read one CSV per allotype.

    Parameters
    ----------
    label_and_paths : list of (string, string)
        Allotype label and CSV path, in allotype index order.

    Returns
    -------
    list of (string, list of RawRecord), suitable for `prepare_dataset`
    """
    return [
        (label, load_records(path, label, i, **read_csv_kwargs))
        for (i, (label, path)) in enumerate(label_and_paths)
    ]
