"""
Feed-forward neural network assigning encoded 9-mers to allotypes.
"""
import json
import logging
import os
import time
from os.path import join, exists

import numpy
import pandas

from .common import (
    configure_tensorflow,
    save_weights,
    load_weights,
    NumpyJSONEncoder,
)
from .hyperparameters import HyperparameterDefaults
from .peptide_encoding import (
    ENCODED_LENGTH,
    decode_labels,
    encode_peptides,
    check_peptide_length,
)
from .records import is_valid_peptide
from .version import __version__


DEFAULT_PREDICT_BATCH_SIZE = 4096


class AllotypeClassifier(object):
    """
    Single neural network predicting, for each peptide, a probability for
    every allotype.

    Input is the flattened BLOSUM62 encoding (180 values per peptide) and
    the output a softmax over `num_classes` allotypes.
    """

    network_hyperparameter_defaults = HyperparameterDefaults(
        num_classes=5,
        layer_sizes=[16],
        activation="relu",
        output_activation="softmax",
        dropout_probability=0.0,
        dense_layer_l1_regularization=0.0,
        dense_layer_l2_regularization=0.0,
        init="glorot_uniform")
    """
    Hyperparameters (and their default values) that affect the neural network
    architecture.
    """

    compile_hyperparameter_defaults = HyperparameterDefaults(
        loss="categorical_crossentropy",
        optimizer="adam",
        learning_rate=None)
    """
    Loss and optimizer hyperparameters.
    """

    fit_hyperparameter_defaults = HyperparameterDefaults(
        max_epochs=20,
        minibatch_size=128,
        validation_split=0.2,
        random_seed=0)
    """
    Hyperparameters for neural network training.
    """

    hyperparameter_defaults = network_hyperparameter_defaults.extend(
        compile_hyperparameter_defaults).extend(
        fit_hyperparameter_defaults)
    """
    Combined set of all supported hyperparameters and their default values.
    """

    def __init__(self, allotype_labels=None, **hyperparameters):
        self.hyperparameters = self.hyperparameter_defaults.with_defaults(
            hyperparameters)
        if allotype_labels is not None:
            allotype_labels = list(allotype_labels)
            if len(allotype_labels) != self.hyperparameters["num_classes"]:
                raise ValueError(
                    "Got %d allotype labels for %d classes" % (
                        len(allotype_labels),
                        self.hyperparameters["num_classes"]))
        self.allotype_labels = allotype_labels
        self.fit_info = []
        self.network_weights = None
        self._network = None

    def __repr__(self):
        return "<AllotypeClassifier [allopep %s] classes=%s fits=%d>" % (
            __version__,
            self.allotype_labels or self.hyperparameters["num_classes"],
            len(self.fit_info))

    def network(self):
        """
        Return the keras model, building it (and restoring weights) if
        needed.
        """
        if self._network is None:
            self._network = self.make_network(
                **self.network_hyperparameter_defaults.subselect(
                    self.hyperparameters))
            if self.network_weights is not None:
                self._network.set_weights(self.network_weights)
                self.network_weights = None
        return self._network

    def make_network(
            self,
            num_classes,
            layer_sizes,
            activation,
            output_activation,
            dropout_probability,
            dense_layer_l1_regularization,
            dense_layer_l2_regularization,
            init):
        """
        Helper function to make the keras network.
        """
        # Keras is imported here so tensorflow only loads when a network is
        # actually needed.
        configure_tensorflow()
        from tensorflow import keras
        from tensorflow.keras.layers import Input, Dense, Dropout

        keras.utils.set_random_seed(self.hyperparameters["random_seed"])

        kernel_regularizer = None
        l1 = dense_layer_l1_regularization
        l2 = dense_layer_l2_regularization
        if l1 > 0 or l2 > 0:
            kernel_regularizer = keras.regularizers.l1_l2(l1=l1, l2=l2)

        peptide_input = Input(
            shape=(ENCODED_LENGTH,), dtype="float32", name="peptide")
        current_layer = peptide_input
        for (i, layer_size) in enumerate(layer_sizes):
            current_layer = Dense(
                layer_size,
                activation=activation,
                kernel_initializer=init,
                kernel_regularizer=kernel_regularizer,
                name="dense_%d" % i)(current_layer)
            if dropout_probability > 0:
                current_layer = Dropout(
                    rate=dropout_probability,
                    name="dropout_%d" % i)(current_layer)

        output = Dense(
            num_classes,
            kernel_initializer=init,
            activation=output_activation,
            name="output")(current_layer)
        return keras.models.Model(
            inputs=[peptide_input],
            outputs=[output],
            name="allotype_classifier")

    def check_shapes(self, x, y=None):
        x = numpy.asarray(x, dtype="float32")
        if x.ndim != 2 or x.shape[1] != ENCODED_LENGTH:
            raise ValueError(
                "Expected encoded peptides of shape (n, %d), got %s" % (
                    ENCODED_LENGTH, str(x.shape)))
        if y is None:
            return (x, None)
        y = numpy.asarray(y, dtype="float32")
        expected = (len(x), self.hyperparameters["num_classes"])
        if y.shape != expected:
            raise ValueError(
                "Expected one-hot labels of shape %s, got %s" % (
                    str(expected), str(y.shape)))
        return (x, y)

    def fit(self, x, y, verbose=0):
        """
        Fit the network.

        Parameters
        ----------
        x : numpy.array of shape (n, 180)
            Encoded peptides, see `encode_peptides`
        y : numpy.array of shape (n, num_classes)
            One-hot allotype labels, see `encode_labels`
        verbose : int
            Keras verbosity
        """
        (x, y) = self.check_shapes(x, y)
        start = time.time()

        network = self.network()
        from tensorflow import keras
        keras.utils.set_random_seed(self.hyperparameters["random_seed"])
        optimizer = keras.optimizers.get(self.hyperparameters["optimizer"])
        if self.hyperparameters["learning_rate"] is not None:
            optimizer.learning_rate = self.hyperparameters["learning_rate"]
        network.compile(
            loss=self.hyperparameters["loss"],
            optimizer=optimizer,
            metrics=["accuracy"])

        fit_history = network.fit(
            x,
            y,
            shuffle=True,
            batch_size=self.hyperparameters["minibatch_size"],
            epochs=self.hyperparameters["max_epochs"],
            validation_split=self.hyperparameters["validation_split"],
            verbose=verbose)

        fit_info = dict(
            (key, [float(v) for v in value])
            for (key, value) in fit_history.history.items())
        fit_info["time"] = time.time() - start
        fit_info["num_points"] = len(x)
        self.fit_info.append(fit_info)
        logging.info(
            "Fit %d peptides in %0.2f sec: final loss=%g",
            len(x), fit_info["time"], fit_info["loss"][-1])

    def predict(self, x, batch_size=DEFAULT_PREDICT_BATCH_SIZE):
        """
        Predict allotype probabilities.

        Returns
        -------
        numpy.array of shape (n, num_classes)
        """
        (x, _) = self.check_shapes(x)
        if len(x) == 0:
            return numpy.zeros(
                (0, self.hyperparameters["num_classes"]), dtype="float64")
        predictions = self.network().predict(
            x, batch_size=batch_size, verbose=0)
        return numpy.array(predictions, dtype="float64")

    def predict_classes(self, x, batch_size=DEFAULT_PREDICT_BATCH_SIZE):
        """
        Predict the index of the most probable allotype.

        Returns
        -------
        numpy.array of int
        """
        return decode_labels(self.predict(x, batch_size=batch_size))

    def evaluate(self, x, y):
        """
        Fraction of peptides whose most probable allotype is the true one.

        Returns
        -------
        float
        """
        (x, y) = self.check_shapes(x, y)
        if len(x) == 0:
            return numpy.nan
        return float(
            (self.predict_classes(x) == decode_labels(y)).mean())

    def predict_to_dataframe(self, peptides, throw=True):
        """
        Predict for raw peptide strings.

        Parameters
        ----------
        peptides : list of string
        throw : bool
            If False, peptides that are not 9-mers over the 20 letter
            alphabet get NaN predictions instead of raising.

        Returns
        -------
        pandas.DataFrame with a "peptide" column, one probability column per
        allotype and a "predicted_allotype" column
        """
        peptides = list(peptides)
        labels = self.allotype_labels or [
            str(i) for i in range(self.hyperparameters["num_classes"])
        ]
        if throw:
            for peptide in peptides:
                check_peptide_length(peptide)
            supported = numpy.ones(len(peptides), dtype=bool)
        else:
            supported = numpy.array(
                [is_valid_peptide(p) for p in peptides], dtype=bool)
            if not supported.all():
                logging.warning(
                    "Returning NaN for %d unsupported peptides",
                    (~supported).sum())

        probabilities = numpy.full(
            (len(peptides), len(labels)), numpy.nan, dtype="float64")
        (x, _) = encode_peptides(
            [p for (p, ok) in zip(peptides, supported) if ok])
        probabilities[supported] = self.predict(x)

        result = pandas.DataFrame(probabilities, columns=labels)
        result.insert(0, "peptide", peptides)
        predicted = numpy.full(len(peptides), None, dtype=object)
        predicted[supported] = numpy.array(labels, dtype=object)[
            probabilities[supported].argmax(axis=1)
        ]
        result["predicted_allotype"] = predicted
        return result

    def get_weights(self):
        """
        Get the network weights

        Returns
        -------
        list of numpy.array giving weights for each layer or None if there is
        no network
        """
        if self._network is not None:
            return self._network.get_weights()
        return self.network_weights

    def get_config(self):
        """
        Serialize to a dict all attributes except model weights.

        Returns
        -------
        dict
        """
        return {
            "hyperparameters": dict(self.hyperparameters),
            "allotype_labels": self.allotype_labels,
            "fit_info": self.fit_info,
        }

    @classmethod
    def from_config(cls, config, weights=None):
        """
        Deserialize from a dict returned by get_config().

        Parameters
        ----------
        config : dict
        weights : list of array, optional
            Network weights to restore

        Returns
        -------
        AllotypeClassifier
        """
        config = dict(config)
        instance = cls(
            allotype_labels=config.get("allotype_labels"),
            **config["hyperparameters"])
        instance.fit_info = config.get("fit_info", [])
        instance.network_weights = weights
        return instance

    def save(self, models_dir):
        """
        Serialize to a directory, which is created if it doesn't exist.

        Writes "config.json" (hyperparameters, allotype labels and fit info)
        and "weights.npz".
        """
        weights = self.get_weights()
        if weights is None:
            raise ValueError("Model has no weights; fit it before saving")
        if not exists(models_dir):
            os.makedirs(models_dir)

        config_path = join(models_dir, "config.json")
        with open(config_path, "w") as fd:
            json.dump(
                self.get_config(), fd, cls=NumpyJSONEncoder, indent=2)
        logging.info("Wrote: %s", config_path)

        weights_path = join(models_dir, "weights.npz")
        save_weights(weights, weights_path)
        logging.info("Wrote: %s", weights_path)

    @classmethod
    def load(cls, models_dir):
        """
        Deserialize a classifier written by `save`.

        Returns
        -------
        AllotypeClassifier
        """
        with open(join(models_dir, "config.json")) as fd:
            config = json.load(fd)
        weights = load_weights(join(models_dir, "weights.npz"))
        logging.info("Loaded allotype classifier from %s", models_dir)
        return cls.from_config(config, weights=weights)
