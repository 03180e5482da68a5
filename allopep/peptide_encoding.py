"""
Encode 9-mer peptides as BLOSUM62 score matrices and allotype indices as
one-hot vectors.
"""
import logging

import numpy
import pandas

from . import amino_acid
from .common import PeptideDatasetError


UNKNOWN_SYMBOL_POLICIES = ("raise", "skip")

ENCODED_SHAPE = (amino_acid.PEPTIDE_LENGTH, amino_acid.vector_encoding_length())
ENCODED_LENGTH = ENCODED_SHAPE[0] * ENCODED_SHAPE[1]


class UnknownSymbolError(PeptideDatasetError):
    """
    Exception raised when a peptide contains a residue that is not in the
    substitution table.
    """
    def __init__(self, peptide, symbol, position):
        self.peptide = peptide
        self.symbol = symbol
        self.position = position
        PeptideDatasetError.__init__(
            self,
            "Peptide encoding failed: peptide '%s' has unknown residue '%s' "
            "at position %d." % (peptide, symbol, position))


class LabelOutOfRangeError(PeptideDatasetError):
    """
    Exception raised when an allotype index does not fit the number of
    classes.
    """
    def __init__(self, label_num, num_classes, row):
        self.label_num = label_num
        self.num_classes = num_classes
        self.row = row
        PeptideDatasetError.__init__(
            self,
            "Label encoding failed: label %s at row %d is outside [0, %d)." % (
                label_num, row, num_classes))


def check_peptide_length(peptide):
    if len(peptide) != amino_acid.PEPTIDE_LENGTH:
        raise ValueError(
            "Peptide '%s' has length %d, only %d-mers are supported." % (
                peptide, len(peptide), amino_acid.PEPTIDE_LENGTH))


def encode(
        peptide,
        table=None,
        alphabet_order=amino_acid.AMINO_ACIDS):
    """
    Encode one 9-mer as a (9, 20) matrix of substitution scores.

    Element (i, j) is the score between the residue at position i and the
    j'th letter of `alphabet_order`.

    Parameters
    ----------
    peptide : string
    table : pandas.DataFrame or dict of dict
        Substitution scores indexed by residue on both axes. If not
        specified, the read-only `amino_acid.BLOSUM62_ARRAY` is used.
    alphabet_order : sequence of string
        Column order of the result

    Returns
    -------
    numpy.array of float32 with shape (9, len(alphabet_order))
    """
    check_peptide_length(peptide)
    if table is None:
        missing = [
            letter for letter in alphabet_order
            if letter not in amino_acid.AMINO_ACID_INDEX
        ]
        if missing:
            raise ValueError(
                "Substitution table has no column for: %s" % " ".join(missing))
        columns = [amino_acid.AMINO_ACID_INDEX[letter] for letter in alphabet_order]
        (row_indices,) = peptide_index_encoding([peptide])
        return amino_acid.BLOSUM62_ARRAY[row_indices][:, columns]

    if not isinstance(table, pandas.DataFrame):
        table = pandas.DataFrame.from_dict(table, orient="index")
    missing = [letter for letter in alphabet_order if letter not in table.columns]
    if missing:
        raise ValueError(
            "Substitution table has no column for: %s" % " ".join(missing))
    for (position, symbol) in enumerate(peptide):
        if symbol not in table.index:
            raise UnknownSymbolError(peptide, symbol, position)
    return table.loc[
        list(peptide), list(alphabet_order)
    ].values.astype("float32")


def peptide_index_encoding(peptides):
    """
    Map peptides to an (n, 9) matrix of alphabet indices.

    Raises UnknownSymbolError on the first residue outside the alphabet and
    ValueError on a peptide of the wrong length.
    """
    peptides = list(peptides)
    for peptide in peptides:
        check_peptide_length(peptide)
    try:
        result = amino_acid.index_encoding(peptides)
    except KeyError:
        for peptide in peptides:
            for (position, symbol) in enumerate(peptide):
                if symbol not in amino_acid.AMINO_ACID_INDEX:
                    raise UnknownSymbolError(peptide, symbol, position)
        raise
    return result.reshape((len(peptides), amino_acid.PEPTIDE_LENGTH))


def encode_peptides(peptides, unknown_symbol_policy="raise", flatten=True):
    """
    Encode many 9-mers with the BLOSUM62 table.

    Parameters
    ----------
    peptides : list of string
    unknown_symbol_policy : string
        "raise": the whole batch fails on the first unknown residue.
        "skip": peptides with unknown residues are dropped and logged.
    flatten : bool
        If True, each peptide is a row of length 180, otherwise a (9, 20)
        matrix.

    Returns
    -------
    (numpy.array, numpy.array of int) : the encoded peptides and the indices
    (into `peptides`) of the rows that were kept
    """
    if unknown_symbol_policy not in UNKNOWN_SYMBOL_POLICIES:
        raise ValueError(
            "Unsupported unknown_symbol_policy: %s. Valid values are: %s" % (
                unknown_symbol_policy, " ".join(UNKNOWN_SYMBOL_POLICIES)))
    peptides = list(peptides)

    if unknown_symbol_policy == "raise":
        kept = numpy.arange(len(peptides))
        index_encoded = peptide_index_encoding(peptides)
    else:
        kept = []
        rows = []
        for (i, peptide) in enumerate(peptides):
            try:
                (row,) = peptide_index_encoding([peptide])
            except UnknownSymbolError as e:
                logging.debug("Skipping: %s", e)
                continue
            kept.append(i)
            rows.append(row)
        if len(kept) < len(peptides):
            logging.warning(
                "Skipped %d / %d peptides with unknown residues",
                len(peptides) - len(kept), len(peptides))
        kept = numpy.array(kept, dtype=int)
        index_encoded = numpy.array(rows, dtype="int32").reshape(
            (len(kept), amino_acid.PEPTIDE_LENGTH))

    result = amino_acid.fixed_vectors_encoding(
        index_encoded, amino_acid.BLOSUM62_ARRAY)
    if flatten:
        result = result.reshape((len(kept), ENCODED_LENGTH))
    return (result, kept)


def encode_labels(label_nums, num_classes=5):
    """
    One-hot encode allotype indices.

    Parameters
    ----------
    label_nums : list of int
    num_classes : int

    Returns
    -------
    numpy.array of float32 with shape (len(label_nums), num_classes)
    """
    label_nums = numpy.asarray(label_nums)
    if label_nums.ndim != 1:
        raise ValueError(
            "Expected a 1-dimensional sequence of labels, got shape %s" % (
                str(label_nums.shape),))
    for (row, label_num) in enumerate(label_nums):
        if (not numpy.issubdtype(type(label_num), numpy.integer) or
                not 0 <= label_num < num_classes):
            raise LabelOutOfRangeError(label_num, num_classes, row)
    return numpy.eye(num_classes, dtype="float32")[label_nums.astype(int)]


def decode_labels(one_hot):
    """
    Inverse of `encode_labels`. Also turns a matrix of class probabilities
    into the index of the most probable class per row.

    Returns
    -------
    numpy.array of int
    """
    one_hot = numpy.asarray(one_hot)
    if one_hot.ndim != 2:
        raise ValueError(
            "Expected a 2-dimensional array, got shape %s" % (
                str(one_hot.shape),))
    return one_hot.argmax(axis=1)
