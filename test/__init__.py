'''
Utility functions for tests.
'''

import logging
import os
import time

import numpy


def initialize():
    '''
    Quiet noisy loggers and seed numpy's global random state.
    '''
    logging.getLogger("tensorflow").disabled = True
    logging.getLogger("matplotlib").disabled = True

    seed = int(os.environ.get("ALLOPEP_TEST_SEED", 1))
    if seed == 0:
        # Enable nondeterminism
        seed = int(time.time())
    print("Using random seed", seed)
    numpy.random.seed(seed)
    return seed
