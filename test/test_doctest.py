"""
Run doctests.
"""
import doctest

import allopep.records


def test_doctests():
    results = doctest.testmod(allopep.records)
    assert results.failed == 0, results.failed
