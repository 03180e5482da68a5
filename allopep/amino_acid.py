"""
The fixed 20 letter amino acid alphabet and the BLOSUM62 substitution table
used to turn 9-mer peptides into vector representations.
"""

import collections
from io import StringIO

import numpy
import pandas


PEPTIDE_LENGTH = 9

COMMON_AMINO_ACIDS = collections.OrderedDict(sorted({
    "A": "Alanine",
    "R": "Arginine",
    "N": "Asparagine",
    "D": "Aspartic Acid",
    "C": "Cysteine",
    "E": "Glutamic Acid",
    "Q": "Glutamine",
    "G": "Glycine",
    "H": "Histidine",
    "I": "Isoleucine",
    "L": "Leucine",
    "K": "Lysine",
    "M": "Methionine",
    "F": "Phenylalanine",
    "P": "Proline",
    "S": "Serine",
    "T": "Threonine",
    "W": "Tryptophan",
    "Y": "Tyrosine",
    "V": "Valine",
}.items()))

# Canonical column order of every encoding: alphabetical by one letter code.
AMINO_ACIDS = tuple(COMMON_AMINO_ACIDS)

AMINO_ACID_INDEX = dict(
    (letter, i) for (i, letter) in enumerate(AMINO_ACIDS))

BLOSUM62_MATRIX = pandas.read_table(StringIO("""
   A  R  N  D  C  Q  E  G  H  I  L  K  M  F  P  S  T  W  Y  V
A  4 -1 -2 -2  0 -1 -1  0 -2 -1 -1 -1 -1 -2 -1  1  0 -3 -2  0
R -1  5  0 -2 -3  1  0 -2  0 -3 -2  2 -1 -3 -2 -1 -1 -3 -2 -3
N -2  0  6  1 -3  0  0  0  1 -3 -3  0 -2 -3 -2  1  0 -4 -2 -3
D -2 -2  1  6 -3  0  2 -1 -1 -3 -4 -1 -3 -3 -1  0 -1 -4 -3 -3
C  0 -3 -3 -3  9 -3 -4 -3 -3 -1 -1 -3 -1 -2 -3 -1 -1 -2 -2 -1
Q -1  1  0  0 -3  5  2 -2  0 -3 -2  1  0 -3 -1  0 -1 -2 -1 -2
E -1  0  0  2 -4  2  5 -2  0 -3 -3  1 -2 -3 -1  0 -1 -3 -2 -2
G  0 -2  0 -1 -3 -2 -2  6 -2 -4 -4 -2 -3 -3 -2  0 -2 -2 -3 -3
H -2  0  1 -1 -3  0  0 -2  8 -3 -3 -1 -2 -1 -2 -1 -2 -2  2 -3
I -1 -3 -3 -3 -1 -3 -3 -4 -3  4  2 -3  1  0 -3 -2 -1 -3 -1  3
L -1 -2 -3 -4 -1 -2 -3 -4 -3  2  4 -2  2  0 -3 -2 -1 -2 -1  1
K -1  2  0 -1 -3  1  1 -2 -1 -3 -2  5 -1 -3 -1  0 -1 -3 -2 -2
M -1 -1 -2 -3 -1  0 -2 -3 -2  1  2 -1  5  0 -2 -1 -1 -1 -1  1
F -2 -3 -3 -3 -2 -3 -3 -3 -1  0  0 -3  0  6 -4 -2 -2  1  3 -1
P -1 -2 -2 -1 -3 -1 -1 -2 -2 -3 -3 -1 -2 -4  7 -1 -1 -4 -3 -2
S  1 -1  1  0 -1  0  0  0 -1 -2 -2  0 -1 -2 -1  4  1 -3 -2 -2
T  0 -1  0 -1 -1 -1 -1 -2 -2 -1 -1 -1 -1 -2 -1  1  5 -2 -2  0
W -3 -3 -4 -4 -2 -2 -3 -2 -2 -3 -2 -3 -1  1 -4 -3 -2 11  2 -3
Y -2 -2 -2 -3 -2 -1 -2 -3  2 -1 -1 -2 -1  3 -3 -2 -2  2  7 -1
V  0 -3 -3 -3 -1 -2 -2 -3 -3  3  1 -2  1 -1 -2 -2  0 -3 -1  4
"""), sep=r'\s+').loc[list(AMINO_ACIDS), list(AMINO_ACIDS)]
assert (BLOSUM62_MATRIX == BLOSUM62_MATRIX.T).all().all()

# Float copy of the table in canonical order. Read-only for the life of the
# process so every encoding made from it is reproducible.
BLOSUM62_ARRAY = BLOSUM62_MATRIX.values.astype("float32")
BLOSUM62_ARRAY.setflags(write=False)


def vector_encoding_length():
    """
    Length of the per-residue vector (one score per alphabet letter).

    Returns
    -------
    int
    """
    return len(AMINO_ACIDS)


def index_encoding(sequences, letter_to_index_dict=AMINO_ACID_INDEX):
    """
    Encode a sequence of same-length strings to a matrix of integers of the
    same shape. The map from characters to integers is given by
    `letter_to_index_dict`.

    Given a sequence of `n` strings all of length `k`, return a `n * k` array
    where the (`i`, `j`)th element is `letter_to_index_dict[sequence[i][j]]`.

    Parameters
    ----------
    sequences : list of length n of strings of length k
    letter_to_index_dict : dict : string -> int

    Returns
    -------
    numpy.array of integers with shape (`n`, `k`)

    Raises
    ------
    KeyError if a character is missing from `letter_to_index_dict`
    """
    sequences = list(sequences)
    length = len(sequences[0]) if sequences else 0
    result = numpy.empty((len(sequences), length), dtype="int32")
    for (i, sequence) in enumerate(sequences):
        result[i] = [letter_to_index_dict[letter] for letter in sequence]
    return result


def fixed_vectors_encoding(index_encoded_sequences, letter_to_vector_array):
    """
    Given a `n` x `k` matrix of integers such as that returned by
    `index_encoding()` and an array mapping each index to a vector, return a
    `n * k * m` array where the (`i`, `j`)'th element is
    `letter_to_vector_array[sequence[i][j]]`.

    Parameters
    ----------
    index_encoded_sequences : `n` x `k` array of integers

    letter_to_vector_array : numpy.array of shape (`alphabet size`, `m`)

    Returns
    -------
    numpy.array with shape (`n`, `k`, `m`)
    """
    (num_sequences, sequence_length) = index_encoded_sequences.shape
    target_shape = (
        num_sequences, sequence_length, letter_to_vector_array.shape[1])
    return numpy.asarray(letter_to_vector_array)[
        index_encoded_sequences.flatten()
    ].reshape(target_shape)
