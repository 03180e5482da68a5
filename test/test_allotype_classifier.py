from . import initialize
initialize()

import shutil
import tempfile

import numpy
import pandas
import pytest
from numpy.testing import assert_array_almost_equal, assert_equal

from allopep.allotype_classifier import AllotypeClassifier
from allopep.common import random_peptides
from allopep.peptide_encoding import encode_peptides, encode_labels

from allopep.testing_utils import cleanup, startup


@pytest.fixture(autouse=True, scope="module")
def keras_session():
    startup()
    yield
    cleanup()


# Each allotype gets its own residue at positions 2 and 9, as for the anchor
# residues of real class I ligands.
ANCHORS = ["LV", "YF", "RK", "PL", "EW"]
ALLOTYPES = ["A01", "A02", "A31", "B07", "B44"]


def anchored_peptides(num_per_class, seed=0):
    random_state = numpy.random.RandomState(seed)
    peptides = []
    labels = []
    for (label_num, (p2, p9)) in enumerate(ANCHORS):
        for peptide in random_peptides(
                num_per_class, random_state=random_state):
            peptides.append(peptide[0] + p2 + peptide[2:8] + p9)
            labels.append(label_num)
    return (peptides, numpy.array(labels))


def make_data(num_per_class, seed=0):
    (peptides, labels) = anchored_peptides(num_per_class, seed=seed)
    (x, _) = encode_peptides(peptides)
    return (x, encode_labels(labels, num_classes=5))


HYPERPARAMETERS = dict(
    layer_sizes=[16],
    max_epochs=40,
    minibatch_size=32,
    validation_split=0.1,
    random_seed=1)


def test_fit_predict_evaluate():
    (x_train, y_train) = make_data(100, seed=0)
    (x_test, y_test) = make_data(20, seed=1)

    classifier = AllotypeClassifier(
        allotype_labels=ALLOTYPES, **HYPERPARAMETERS)
    classifier.fit(x_train, y_train)

    assert len(classifier.fit_info) == 1
    assert len(classifier.fit_info[0]["loss"]) == 40
    assert "val_loss" in classifier.fit_info[0]
    assert classifier.fit_info[0]["num_points"] == 500

    probabilities = classifier.predict(x_test)
    assert probabilities.shape == (100, 5)
    assert_array_almost_equal(probabilities.sum(axis=1), numpy.ones(100), 5)

    assert classifier.evaluate(x_train, y_train) > 0.9
    assert classifier.evaluate(x_test, y_test) > 0.8
    assert classifier.predict_classes(x_test).shape == (100,)


def test_save_and_load():
    (x_train, y_train) = make_data(40, seed=0)
    classifier = AllotypeClassifier(
        allotype_labels=ALLOTYPES, **dict(HYPERPARAMETERS, max_epochs=2))
    classifier.fit(x_train, y_train)
    predictions = classifier.predict(x_train)

    models_dir = tempfile.mkdtemp(prefix="allopep-test-models")
    try:
        classifier.save(models_dir)
        loaded = AllotypeClassifier.load(models_dir)
    finally:
        shutil.rmtree(models_dir)

    assert loaded.allotype_labels == ALLOTYPES
    assert loaded.hyperparameters == classifier.hyperparameters
    assert loaded.fit_info[0]["num_points"] == 200
    assert_array_almost_equal(loaded.predict(x_train), predictions, 5)


def test_save_unfit_model():
    with pytest.raises(ValueError):
        AllotypeClassifier().save(tempfile.mkdtemp())


def test_predict_to_dataframe():
    (peptides, labels) = anchored_peptides(20)
    (x, _) = encode_peptides(peptides)
    classifier = AllotypeClassifier(
        allotype_labels=ALLOTYPES, **dict(HYPERPARAMETERS, max_epochs=2))
    classifier.fit(x, encode_labels(labels))

    df = classifier.predict_to_dataframe(
        ["SLYNTVATL", "SIINFEKL", "SIINFXKLL"], throw=False)
    assert list(df.columns) == ["peptide"] + ALLOTYPES + ["predicted_allotype"]
    assert not df.iloc[0].isnull().any()
    assert df.iloc[0].predicted_allotype in ALLOTYPES
    assert df.iloc[1:][ALLOTYPES].isnull().all().all()
    assert df.iloc[1:].predicted_allotype.isnull().all()

    with pytest.raises(ValueError):
        classifier.predict_to_dataframe(["SIINFEKL"])


def test_bad_shapes():
    classifier = AllotypeClassifier(allotype_labels=ALLOTYPES)
    with pytest.raises(ValueError):
        classifier.fit(numpy.zeros((10, 179)), numpy.zeros((10, 5)))
    with pytest.raises(ValueError):
        classifier.fit(numpy.zeros((10, 180)), numpy.zeros((10, 4)))
    with pytest.raises(ValueError):
        AllotypeClassifier(allotype_labels=ALLOTYPES[:3])
    with pytest.raises(ValueError):
        AllotypeClassifier(no_such_parameter=1)


def test_config_round_trip():
    classifier = AllotypeClassifier(
        allotype_labels=ALLOTYPES, layer_sizes=[8, 4], dropout_probability=0.1)
    config = classifier.get_config()
    restored = AllotypeClassifier.from_config(config)
    assert restored.hyperparameters == classifier.hyperparameters
    assert restored.allotype_labels == ALLOTYPES
    network = restored.network()
    assert tuple(network.outputs[0].shape) == (None, 5)
    assert [layer.name for layer in network.layers if "dense" in layer.name] == [
        "dense_0", "dense_1"]
