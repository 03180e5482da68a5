from . import initialize
initialize()

import numpy
import pandas
import pytest
from numpy.testing import assert_equal, assert_array_equal

from allopep import amino_acid
from allopep.common import random_peptides
from allopep.peptide_encoding import (
    encode,
    encode_peptides,
    peptide_index_encoding,
    encode_labels,
    decode_labels,
    UnknownSymbolError,
    LabelOutOfRangeError,
    ENCODED_LENGTH,
)


def test_encode_row_is_table_row():
    result = encode("ACDEFGHIK")
    assert result.shape == (9, 20)
    assert_array_equal(
        result[0],
        amino_acid.BLOSUM62_MATRIX.loc["A", list(amino_acid.AMINO_ACIDS)])
    for (i, letter) in enumerate("ACDEFGHIK"):
        assert_array_equal(
            result[i], amino_acid.BLOSUM62_MATRIX.loc[letter].values)
    assert not numpy.isnan(result).any()


def test_encode_is_deterministic():
    (peptide,) = random_peptides(1, random_state=numpy.random.RandomState(3))
    first = encode(peptide)
    second = encode(peptide)
    assert_array_equal(first, second)
    assert first.tobytes() == second.tobytes()


def test_encode_custom_table_and_order():
    table = {
        "A": {"A": 2, "C": 1},
        "C": {"A": 1, "C": 3},
    }
    result = encode("ACAAAAAAC", table=table, alphabet_order=["C", "A"])
    assert result.shape == (9, 2)
    assert_equal(result[0], [1, 2])
    assert_equal(result[1], [3, 1])


def test_encode_unknown_symbol():
    with pytest.raises(UnknownSymbolError) as info:
        encode("ACDEXGHIK")
    assert info.value.symbol == "X"
    assert info.value.position == 4
    assert info.value.peptide == "ACDEXGHIK"

    # Lowercase residues are not in the table either.
    with pytest.raises(UnknownSymbolError):
        encode("ACDEFGHIl")


def test_encode_wrong_length():
    with pytest.raises(ValueError):
        encode("ACDEFGHI")


def test_encode_default_table_ignores_dataframe_writes():
    peptides = ["AAAAAAAAA", "ACDEFGHIK"]
    original = amino_acid.BLOSUM62_MATRIX.loc["A", "A"]
    amino_acid.BLOSUM62_MATRIX.loc["A", "A"] = 100
    try:
        (flat, _) = encode_peptides(peptides)
        for (i, peptide) in enumerate(peptides):
            assert_array_equal(flat[i].reshape((9, 20)), encode(peptide))
        assert encode("AAAAAAAAA")[0, 0] == 4
    finally:
        amino_acid.BLOSUM62_MATRIX.loc["A", "A"] = original
    assert amino_acid.BLOSUM62_MATRIX.loc["A", "A"] == 4


def test_encode_default_table_alphabet_order():
    result = encode("ACDEFGHIK", alphabet_order=["C", "A"])
    assert result.shape == (9, 2)
    assert_equal(result[0], [0, 4])
    assert_equal(result[1], [9, 0])
    with pytest.raises(ValueError):
        encode("ACDEFGHIK", alphabet_order=["A", "X"])


def test_peptide_index_encoding_uses_alphabet_indices():
    peptides = ["ACDEFGHIK", "YWVTSRQPN"]
    assert_equal(
        peptide_index_encoding(peptides),
        amino_acid.index_encoding(peptides))
    assert peptide_index_encoding([]).shape == (0, 9)
    with pytest.raises(UnknownSymbolError) as info:
        peptide_index_encoding(["ACDEFGHIK", "ACDEFGHBK"])
    assert info.value.peptide == "ACDEFGHBK"
    assert info.value.symbol == "B"
    assert info.value.position == 7
    with pytest.raises(ValueError):
        peptide_index_encoding(["ACDEFGHIK", "ACD"])


def test_encode_peptides_matches_encode():
    peptides = random_peptides(50, random_state=numpy.random.RandomState(0))
    (flat, kept) = encode_peptides(peptides)
    assert flat.shape == (50, ENCODED_LENGTH)
    assert_equal(kept, numpy.arange(50))
    for (i, peptide) in enumerate(peptides):
        assert_array_equal(flat[i].reshape((9, 20)), encode(peptide))

    (unflattened, _) = encode_peptides(peptides, flatten=False)
    assert unflattened.shape == (50, 9, 20)
    assert_array_equal(unflattened.reshape((50, ENCODED_LENGTH)), flat)


def test_encode_peptides_unknown_symbol_policy():
    peptides = ["SIINFEKLL", "SIINFXKLL", "YLQPRTFLL", "SIINFBKLL"]

    with pytest.raises(UnknownSymbolError):
        encode_peptides(peptides)

    (encoded, kept) = encode_peptides(peptides, unknown_symbol_policy="skip")
    assert_equal(kept, [0, 2])
    assert encoded.shape == (2, ENCODED_LENGTH)
    assert_array_equal(encoded[1], encode("YLQPRTFLL").flatten())

    (encoded, kept) = encode_peptides(
        ["SIINFXKLL"], unknown_symbol_policy="skip")
    assert encoded.shape == (0, ENCODED_LENGTH)
    assert len(kept) == 0

    with pytest.raises(ValueError):
        encode_peptides(peptides, unknown_symbol_policy="ignore")


def test_encode_peptides_empty():
    (encoded, kept) = encode_peptides([])
    assert encoded.shape == (0, ENCODED_LENGTH)
    assert len(kept) == 0


def test_encode_labels():
    result = encode_labels([0, 4, 2], num_classes=5)
    assert_equal(
        result,
        [
            [1, 0, 0, 0, 0],
            [0, 0, 0, 0, 1],
            [0, 0, 1, 0, 0],
        ])
    assert encode_labels([], num_classes=5).shape == (0, 5)


def test_label_round_trip():
    labels = numpy.array([0, 1, 2, 3, 4, 3, 0])
    assert_equal(decode_labels(encode_labels(labels, num_classes=5)), labels)
    assert_equal(
        decode_labels(pandas.DataFrame(encode_labels(labels))), labels)


def test_decode_probabilities():
    probabilities = [
        [0.1, 0.7, 0.2],
        [0.5, 0.3, 0.2],
    ]
    assert_equal(decode_labels(probabilities), [1, 0])


def test_encode_labels_out_of_range():
    with pytest.raises(LabelOutOfRangeError) as info:
        encode_labels([0, 1, 5], num_classes=5)
    assert info.value.label_num == 5
    assert info.value.row == 2

    with pytest.raises(LabelOutOfRangeError):
        encode_labels([-1], num_classes=5)

    with pytest.raises(LabelOutOfRangeError):
        encode_labels([1.5], num_classes=5)
