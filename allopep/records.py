"""
Loading and normalization of per-allotype peptide records.
"""
import collections
import logging
import re

import pandas

from . import amino_acid
from .common import PeptideDatasetError


LINEAR_PEPTIDE = "Linear peptide"

# Parenthesized annotations such as modifications: "SIINFEKL (+OX)"
ANNOTATION_REGEX = re.compile(r"\([^)]*\)")


RawRecord = collections.namedtuple(
    "RawRecord", [
        "sequence",
        "object_type",
        "source_allotype_label",
        "source_allotype_index",
    ])


class NormalizedPeptide(collections.namedtuple(
        "NormalizedPeptide", ["peptide", "label_chr", "label_num"])):
    """
    A valid 9-mer tagged with the allotype it was observed with.
    """
    __slots__ = ()

    def to_raw_record(self):
        """
        Wrap this peptide back up as a linear peptide RawRecord.
        """
        return RawRecord(
            sequence=self.peptide,
            object_type=LINEAR_PEPTIDE,
            source_allotype_label=self.label_chr,
            source_allotype_index=self.label_num)


class MalformedRecordError(PeptideDatasetError):
    """
    Exception raised for a record that does not look like a RawRecord. These
    are never surfaced by `normalize`; such records are filtered out.
    """


def strip_annotations(sequence):
    """
    Remove parenthesized annotations and surrounding whitespace.

    >>> strip_annotations("SIINFEKLL (+OX)")
    'SIINFEKLL'
    """
    return ANNOTATION_REGEX.sub("", sequence).strip()


def record_sequence(record):
    """
    Return the annotation-stripped sequence and the object type of a record.

    A NormalizedPeptide counts as a linear peptide record. Raises
    MalformedRecordError if the record has no usable sequence or object type.
    """
    if isinstance(record, NormalizedPeptide):
        return (record.peptide, LINEAR_PEPTIDE)
    try:
        sequence = record.sequence
        object_type = record.object_type
    except AttributeError:
        raise MalformedRecordError("Not a peptide record: %r" % (record,))
    if not isinstance(sequence, str):
        raise MalformedRecordError(
            "Record sequence is not a string: %r" % (record,))
    if not isinstance(object_type, str):
        raise MalformedRecordError(
            "Record object type is not a string: %r" % (record,))
    return (strip_annotations(sequence), object_type)


def is_valid_peptide(sequence):
    """
    True if the sequence is a 9-mer over the 20 letter alphabet.
    """
    return (
        len(sequence) == amino_acid.PEPTIDE_LENGTH and
        all(letter in amino_acid.AMINO_ACID_INDEX for letter in sequence))


def normalize(raw_records, allotype_label, allotype_index):
    """
    Keep the linear 9-mer peptides of one allotype's records and label them.

    Records are dropped if their object type is not "Linear peptide", if
    their sequence (after removing parenthesized annotations) contains any
    symbol outside the 20 letter alphabet, or if it is not exactly 9
    residues long. Input order is preserved.

    Parameters
    ----------
    raw_records : iterable of RawRecord or NormalizedPeptide
    allotype_label : string
    allotype_index : int

    Returns
    -------
    list of NormalizedPeptide
    """
    result = []
    dropped = collections.Counter()
    for record in raw_records:
        try:
            (sequence, object_type) = record_sequence(record)
        except MalformedRecordError as e:
            logging.debug("Dropping: %s", e)
            dropped["malformed"] += 1
            continue
        if object_type != LINEAR_PEPTIDE:
            dropped["object type"] += 1
        elif not all(
                letter in amino_acid.AMINO_ACID_INDEX for letter in sequence):
            dropped["ambiguous residue"] += 1
        elif len(sequence) != amino_acid.PEPTIDE_LENGTH:
            dropped["length"] += 1
        else:
            result.append(NormalizedPeptide(
                peptide=sequence,
                label_chr=allotype_label,
                label_num=allotype_index))
    logging.info(
        "Normalized %s: kept %d peptides, dropped %d (%s)",
        allotype_label,
        len(result),
        sum(dropped.values()),
        ", ".join("%s: %d" % item for item in sorted(dropped.items())))
    return result


def records_from_dataframe(
        df,
        allotype_label,
        allotype_index,
        sequence_column="Description",
        object_type_column="Object Type"):
    """
    Convert a table with one row per observed peptide to RawRecords.

    Parameters
    ----------
    df : pandas.DataFrame
    allotype_label : string
    allotype_index : int
    sequence_column : string
    object_type_column : string

    Returns
    -------
    list of RawRecord
    """
    for col in [sequence_column, object_type_column]:
        if col not in df.columns:
            raise ValueError(
                "No such column '%s' in records for %s. Columns are: %s" % (
                    col,
                    allotype_label,
                    ", ".join(["'%s'" % c for c in df.columns])))
    return [
        RawRecord(
            sequence=sequence,
            object_type=object_type,
            source_allotype_label=allotype_label,
            source_allotype_index=allotype_index)
        for (sequence, object_type) in zip(
            df[sequence_column].values, df[object_type_column].values)
    ]


def load_records(
        path,
        allotype_label,
        allotype_index,
        sequence_column="Description",
        object_type_column="Object Type",
        **read_csv_kwargs):
    """
    Read one allotype's records from a CSV file.

    Extra keyword arguments are passed to `pandas.read_csv`.

    Returns
    -------
    list of RawRecord
    """
    df = pandas.read_csv(path, **read_csv_kwargs)
    logging.info(
        "Read %d rows for %s from %s", len(df), allotype_label, path)
    return records_from_dataframe(
        df,
        allotype_label,
        allotype_index,
        sequence_column=sequence_column,
        object_type_column=object_type_column)
