"""
Random train / test partition of a balanced peptide set.
"""
import collections
import logging
import math

import numpy

from .common import PeptideDatasetError
from .records import NormalizedPeptide


TRAIN = "train"
TEST = "test"

SplitPeptide = collections.namedtuple(
    "SplitPeptide", NormalizedPeptide._fields + ("data_type",))


class InvalidRatioError(PeptideDatasetError):
    """
    Exception raised for a train ratio outside the open interval (0, 1).
    """
    def __init__(self, train_ratio):
        self.train_ratio = train_ratio
        PeptideDatasetError.__init__(
            self,
            "Train / test split failed: train_ratio must be in (0, 1), got "
            "%r." % (train_ratio,))


def split(records, train_ratio, rng_seed):
    """
    Partition peptides into train and test sets.

    floor(train_ratio * n) indices are drawn without replacement with a
    numpy.random.RandomState seeded by `rng_seed`; those peptides, in draw
    order, are the training set. The rest, in input order, are the test set.
    The input is not modified.

    Parameters
    ----------
    records : list of NormalizedPeptide
    train_ratio : float
    rng_seed : int

    Returns
    -------
    (list of SplitPeptide, list of SplitPeptide) : train and test
    """
    try:
        valid = 0 < train_ratio < 1
    except TypeError:
        valid = False
    if not valid:
        raise InvalidRatioError(train_ratio)

    records = list(records)
    train_size = int(math.floor(train_ratio * len(records)))
    train_indices = numpy.random.RandomState(rng_seed).choice(
        len(records), size=train_size, replace=False)
    is_train = numpy.zeros(len(records), dtype=bool)
    is_train[train_indices] = True

    train = [
        SplitPeptide(*records[i], data_type=TRAIN) for i in train_indices
    ]
    test = [
        SplitPeptide(*records[i], data_type=TEST)
        for i in numpy.flatnonzero(~is_train)
    ]
    logging.info(
        "Split %d peptides: %d train, %d test (train_ratio=%g)",
        len(records), len(train), len(test), train_ratio)
    return (train, test)
