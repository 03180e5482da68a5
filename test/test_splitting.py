from . import initialize
initialize()

import math

import numpy
import pytest

from allopep.common import random_peptides
from allopep.records import NormalizedPeptide
from allopep.splitting import (
    split,
    InvalidRatioError,
    SplitPeptide,
    TRAIN,
    TEST,
)


def make_records(n, seed=0):
    peptides = random_peptides(n, random_state=numpy.random.RandomState(seed))
    return [
        NormalizedPeptide(peptide, "A%02d" % (i % 5), i % 5)
        for (i, peptide) in enumerate(peptides)
    ]


@pytest.mark.parametrize("n,ratio", [
    (10, 0.8),
    (5000, 0.8),
    (7, 0.5),
    (1, 0.9),
    (100, 0.29),
    (0, 0.5),
])
def test_split_is_exhaustive(n, ratio):
    records = make_records(n)
    (train, test) = split(records, train_ratio=ratio, rng_seed=0)
    assert len(train) == math.floor(ratio * n)
    assert len(train) + len(test) == n

    # Position in the input identifies a record, since peptides may repeat.
    def strip(items):
        return [NormalizedPeptide(*item[:3]) for item in items]
    assert sorted(strip(train) + strip(test)) == sorted(records)
    assert all(item.data_type == TRAIN for item in train)
    assert all(item.data_type == TEST for item in test)


def test_split_disjoint_indices():
    records = [
        NormalizedPeptide("%09d" % i, "A01", 0) for i in range(100)
    ]
    (train, test) = split(records, train_ratio=0.8, rng_seed=3)
    train_peptides = set(item.peptide for item in train)
    test_peptides = set(item.peptide for item in test)
    assert len(train_peptides) == 80
    assert len(test_peptides) == 20
    assert not train_peptides & test_peptides
    assert train_peptides | test_peptides == set(r.peptide for r in records)

    # Test set keeps input order.
    assert [item.peptide for item in test] == sorted(test_peptides)


def test_split_is_reproducible():
    records = make_records(200)
    assert split(records, 0.8, rng_seed=5) == split(records, 0.8, rng_seed=5)
    assert split(records, 0.8, rng_seed=5) != split(records, 0.8, rng_seed=6)


def test_split_does_not_mutate_input():
    records = make_records(20)
    copy = list(records)
    split(records, 0.5, rng_seed=0)
    assert records == copy


def test_split_output_type():
    (train, test) = split(make_records(10), 0.5, rng_seed=0)
    assert isinstance(train[0], SplitPeptide)
    assert train[0]._fields == (
        "peptide", "label_chr", "label_num", "data_type")


@pytest.mark.parametrize("ratio", [0, 1, 0.0, 1.0, -0.5, 1.5, float("nan"), None, "0.8"])
def test_split_invalid_ratio(ratio):
    with pytest.raises(InvalidRatioError):
        split(make_records(10), train_ratio=ratio, rng_seed=0)
