"""
Utilities used in allopep unit tests.
"""
from .common import configure_tensorflow


def startup():
    """
    Configure tensorflow for running unit tests.
    """
    configure_tensorflow(num_threads=2)


def cleanup():
    """
    Clear the keras session and other process-wide resources.
    """
    from tensorflow.keras import backend as K
    K.clear_session()
