"""
Train an allotype classifier from one CSV of observed peptides per allotype.

Each CSV needs a column with the peptide sequence ("Description" by default)
and a column with the record type ("Object Type" by default). The order of
the --data arguments defines the allotype indices.

Example:

$ allopep-train \
    --data A01=a01.csv A02=a02.csv A31=a31.csv B07=b07.csv B44=b44.csv \
    --hyperparameters hyperparameters.yaml \
    --out-models-dir models
"""
import argparse
import logging
import os
import sys

import pandas
import sklearn.metrics
import yaml

from .allotype_classifier import AllotypeClassifier
from .common import configure_logging
from .peptide_encoding import decode_labels
from .pipeline import (
    DATASET_PREPARATION_DEFAULTS,
    load_record_sets,
    prepare_dataset,
)
from .version import __version__


parser = argparse.ArgumentParser(
    description=__doc__,
    formatter_class=argparse.RawDescriptionHelpFormatter)

parser.add_argument(
    "--data",
    metavar="LABEL=FILE.csv",
    nargs="+",
    required=True,
    help="Allotype label and records CSV, one per allotype")
parser.add_argument(
    "--out-models-dir",
    metavar="DIR",
    required=True,
    help="Directory to write the model to")
parser.add_argument(
    "--hyperparameters",
    metavar="FILE.yaml",
    help="YAML or JSON mapping of dataset preparation and classifier settings")
parser.add_argument(
    "--sequence-column",
    metavar="NAME",
    default="Description",
    help="Input column giving the peptide sequence. Default: '%(default)s'")
parser.add_argument(
    "--object-type-column",
    metavar="NAME",
    default="Object Type",
    help="Input column giving the record type. Default: '%(default)s'")
parser.add_argument(
    "--skip-header-rows",
    metavar="N",
    type=int,
    default=0,
    help="Rows to skip before the CSV header. Default: %(default)s")
parser.add_argument(
    "--write-split-csv",
    metavar="FILE.csv",
    help="Write the balanced peptides with their train/test assignment")
parser.add_argument(
    "--verbosity",
    type=int,
    default=0,
    help="Keras verbosity. Default: %(default)s")
parser.add_argument(
    "--version",
    action="version",
    version="allopep %s" % __version__)


def parse_data_arguments(values):
    """
    Parse LABEL=FILE.csv strings into (label, path) pairs.
    """
    result = []
    for value in values:
        (label, sep, path) = value.partition("=")
        if not sep or not label or not path:
            raise ValueError(
                "Expected LABEL=FILE.csv, got '%s'" % value)
        result.append((label, path))
    return result


def load_hyperparameters(filename):
    """
    Read settings and route them to dataset preparation and the classifier.

    Returns
    -------
    (dict, dict) : dataset preparation settings, classifier hyperparameters
    """
    if not filename:
        return ({}, {})
    with open(filename) as fd:
        settings = yaml.safe_load(fd) or {}
    if not isinstance(settings, dict):
        raise ValueError(
            "Expected a mapping in %s, got %s" % (
                filename, type(settings).__name__))
    dataset_settings = DATASET_PREPARATION_DEFAULTS.subselect(settings)
    classifier_settings = dict(
        (key, value) for (key, value) in settings.items()
        if key not in dataset_settings)
    AllotypeClassifier.hyperparameter_defaults.check_valid_keys(
        classifier_settings)
    return (dataset_settings, classifier_settings)


def allotype_accuracy_report(y_true, y_pred, allotype_labels):
    """
    Confusion matrix with a per-allotype accuracy column.

    Parameters
    ----------
    y_true : numpy.array of int
    y_pred : numpy.array of int
    allotype_labels : list of string

    Returns
    -------
    pandas.DataFrame indexed by true allotype
    """
    labels = list(range(len(allotype_labels)))
    matrix = sklearn.metrics.confusion_matrix(y_true, y_pred, labels=labels)
    result = pandas.DataFrame(
        matrix, index=allotype_labels, columns=allotype_labels)
    result.index.name = "true"
    totals = result.sum(axis=1)
    result["accuracy"] = [
        result.iloc[i, i] / totals.iloc[i] if totals.iloc[i] else float("nan")
        for i in labels
    ]
    return result


def run(argv=sys.argv[1:]):
    logging.getLogger('tensorflow').disabled = True

    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbosity > 1)

    label_and_paths = parse_data_arguments(args.data)
    (dataset_settings, classifier_settings) = load_hyperparameters(
        args.hyperparameters)
    logging.info(
        "Dataset settings: %s", DATASET_PREPARATION_DEFAULTS.with_defaults(
            dataset_settings))

    record_sets = load_record_sets(
        label_and_paths,
        sequence_column=args.sequence_column,
        object_type_column=args.object_type_column,
        skiprows=args.skip_header_rows)
    dataset = prepare_dataset(record_sets, **dataset_settings)

    if args.write_split_csv:
        dataset.to_dataframe().to_csv(args.write_split_csv, index=False)
        logging.info("Wrote: %s", args.write_split_csv)

    classifier_settings.setdefault(
        "num_classes", len(dataset.allotype_labels))
    classifier = AllotypeClassifier(
        allotype_labels=dataset.allotype_labels, **classifier_settings)
    classifier.fit(
        dataset.x_train, dataset.y_train, verbose=args.verbosity)

    train_accuracy = classifier.evaluate(dataset.x_train, dataset.y_train)
    test_accuracy = classifier.evaluate(dataset.x_test, dataset.y_test)
    logging.info(
        "Accuracy: train=%0.4f test=%0.4f", train_accuracy, test_accuracy)
    report = allotype_accuracy_report(
        decode_labels(dataset.y_test),
        classifier.predict_classes(dataset.x_test),
        dataset.allotype_labels)
    logging.info("Test set confusion matrix:\n%s", report)

    classifier.save(os.path.abspath(args.out_models_dir))
    return classifier
