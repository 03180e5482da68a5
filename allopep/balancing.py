"""
Resample every allotype to the same number of peptides.
"""
import collections
import logging

import numpy
import pandas

from .common import PeptideDatasetError


class InsufficientDataError(PeptideDatasetError):
    """
    Exception raised when an allotype has fewer peptides than requested.
    """
    def __init__(self, label_chr, available, requested):
        self.label_chr = label_chr
        self.available = available
        self.requested = requested
        PeptideDatasetError.__init__(
            self,
            "Class balancing failed: allotype '%s' has %d peptides but %d "
            "were requested." % (label_chr, available, requested))


def group_by_label(records):
    """
    Group peptides by allotype, ordered by allotype index then label.

    Returns
    -------
    collections.OrderedDict of string -> list of NormalizedPeptide
    """
    groups = collections.defaultdict(list)
    for record in records:
        groups[record.label_chr].append(record)
    order = sorted(
        groups, key=lambda label: (groups[label][0].label_num, label))
    return collections.OrderedDict(
        (label, groups[label]) for label in order)


def group_sizes(records):
    """
    Number of peptides per allotype.

    Returns
    -------
    pandas.Series indexed by label_chr
    """
    return pandas.Series(
        collections.OrderedDict(
            (label, len(members))
            for (label, members) in group_by_label(records).items()),
        dtype=int)


def balance(records, k, rng_seed):
    """
    Draw exactly `k` peptides per allotype, uniformly without replacement.

    A single numpy.random.RandomState seeded with `rng_seed` samples the
    groups in allotype index order, so the same input, `k` and seed always
    give the same result. The result is the concatenation of the groups in
    that order.

    Parameters
    ----------
    records : list of NormalizedPeptide
    k : int
    rng_seed : int

    Returns
    -------
    list of NormalizedPeptide
    """
    if isinstance(k, bool) or not isinstance(k, (int, numpy.integer)) or k <= 0:
        raise ValueError("k must be a positive integer, not %r" % (k,))

    groups = group_by_label(records)
    for (label, members) in groups.items():
        if len(members) < k:
            raise InsufficientDataError(label, len(members), k)

    random_state = numpy.random.RandomState(rng_seed)
    result = []
    for (label, members) in groups.items():
        indices = random_state.choice(len(members), size=k, replace=False)
        result.extend(members[i] for i in indices)
        logging.debug("Sampled %d / %d peptides for %s", k, len(members), label)
    logging.info(
        "Balanced %d allotypes to %d peptides each (%d total)",
        len(groups), k, len(result))
    return result
