import json
import logging
import sys

import numpy

from . import amino_acid


class PeptideDatasetError(ValueError):
    """
    Base class of the errors raised while preparing or encoding a peptide
    dataset.
    """


TENSORFLOW_CONFIGURED = False


def configure_tensorflow(gpu_device_nums=None, num_threads=None):
    """
    Configure tensorflow devices and threading. Only the first call has any
    effect.

    Parameters
    ----------
    gpu_device_nums : list of int, optional
        GPU devices to potentially use

    num_threads : int, optional
        Tensorflow threads to use
    """
    global TENSORFLOW_CONFIGURED

    if TENSORFLOW_CONFIGURED:
        return

    import tensorflow as tf

    TENSORFLOW_CONFIGURED = True

    # turn on selected GPUs with memory growth enabled
    if gpu_device_nums is not None:
        physical_devices = tf.config.list_physical_devices("GPU")
        tf.config.set_visible_devices(
            [physical_devices[idx] for idx in gpu_device_nums], "GPU"
        )
        for gpu in physical_devices:
            tf.config.experimental.set_memory_growth(gpu, True)

    if num_threads:
        tf.config.threading.set_inter_op_parallelism_threads(num_threads)
        tf.config.threading.set_intra_op_parallelism_threads(num_threads)


def configure_logging(verbose=False):
    """
    Configure logging module using defaults.

    Parameters
    ----------
    verbose : boolean
        If true, output will be at level DEBUG, otherwise, INFO.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        format="%(asctime)s.%(msecs)d %(levelname)s %(module)s - %(funcName)s:"
        " %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        level=level,
    )


def random_peptides(num, length=amino_acid.PEPTIDE_LENGTH, random_state=None):
    """
    Generate random peptides (kmers) drawn uniformly from the 20 letter
    alphabet.

    Parameters
    ----------
    num : int
        Number of peptides to return

    length : int
        Length of each peptide

    random_state : numpy.random.RandomState, optional
        Generator to draw from. A fresh unseeded one is used if not given.

    Returns
    ----------
    list of string
    """
    if num == 0:
        return []
    if random_state is None:
        random_state = numpy.random.RandomState()
    return [
        "".join(peptide_sequence)
        for peptide_sequence in random_state.choice(
            list(amino_acid.AMINO_ACIDS), size=(int(num), int(length)))
    ]


def save_weights(weights_list, filename):
    """
    Save model weights to the given filename using numpy's ".npz" format.

    Parameters
    ----------
    weights_list : list of numpy array

    filename : string
    """
    numpy.savez(
        filename,
        **dict((("array_%d" % i), w) for (i, w) in enumerate(weights_list)))


def load_weights(filename):
    """
    Restore model weights from the given filename, which should have been
    created with `save_weights`.

    Parameters
    ----------
    filename : string

    Returns
    ----------
    list of array
    """
    with numpy.load(filename) as loaded:
        weights = [loaded["array_%d" % i] for i in range(len(loaded.keys()))]
    return weights


class NumpyJSONEncoder(json.JSONEncoder):
    """
    JSON encoder (used with json module) that can handle numpy scalars and
    arrays.
    """

    def default(self, obj):
        if isinstance(obj, numpy.integer):
            return int(obj)
        elif isinstance(obj, numpy.floating):
            return float(obj)
        if isinstance(obj, numpy.ndarray):
            return obj.tolist()
        return json.JSONEncoder.default(self, obj)
