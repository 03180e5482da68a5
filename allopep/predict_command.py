'''
Predict which allotype each peptide associates with, using a model written by
allopep-train.

Examples:

Write a CSV file containing the contents of INPUT.csv plus one probability
column per allotype and a "predicted_allotype" column:

$ allopep-predict INPUT.csv --models models --out RESULT.csv

If `--out` is not specified, results are written to stdout.

You can also give peptides on the commandline:

$ allopep-predict --models models --peptides SIINFEKLL YLQPRTFLL
'''
import argparse
import logging
import sys

import pandas

from .allotype_classifier import AllotypeClassifier
from .common import configure_logging
from .version import __version__


parser = argparse.ArgumentParser(
    description=__doc__,
    formatter_class=argparse.RawDescriptionHelpFormatter)

parser.add_argument(
    "input",
    metavar="INPUT.csv",
    nargs="?",
    help="Input CSV")
parser.add_argument(
    "--peptides",
    metavar="PEPTIDE",
    nargs="+",
    help="Peptides to predict (exclusive with passing an input CSV)")
parser.add_argument(
    "--peptide-column",
    metavar="NAME",
    default="peptide",
    help="Input column name for peptides. Default: '%(default)s'")
parser.add_argument(
    "--models",
    metavar="DIR",
    required=True,
    help="Directory containing a model written by allopep-train")
parser.add_argument(
    "--throw",
    action="store_true",
    default=False,
    help="Raise on peptides that are not 9-mers over the 20 amino acids "
    "instead of returning NaN")
parser.add_argument(
    "--out",
    metavar="OUTPUT.csv",
    help="Output CSV")
parser.add_argument(
    "--prediction-column-prefix",
    metavar="NAME",
    default="allopep_",
    help="Prefix for output column names. Default: '%(default)s'")
parser.add_argument(
    "--version",
    action="version",
    version="allopep %s" % __version__)


def run(argv=sys.argv[1:]):
    logging.getLogger('tensorflow').disabled = True

    if not argv:
        parser.print_help()
        parser.exit(1)

    args = parser.parse_args(argv)
    configure_logging()

    if args.input:
        if args.peptides:
            parser.error(
                "If an input file is specified, do not specify --peptides")
        df = pandas.read_csv(args.input)
        logging.info(
            "Read input CSV with %d rows, columns are: %s",
            len(df), ", ".join(df.columns))
        if args.peptide_column not in df.columns:
            raise ValueError(
                "No such column '%s' in CSV. Columns are: %s" % (
                    args.peptide_column,
                    ", ".join(["'%s'" % c for c in df.columns])))
    else:
        if not args.peptides:
            parser.error(
                "Specify either an input CSV file or the --peptides argument")
        df = pandas.DataFrame({args.peptide_column: args.peptides})

    classifier = AllotypeClassifier.load(args.models)
    predictions = classifier.predict_to_dataframe(
        df[args.peptide_column].astype(str).values, throw=args.throw)

    for col in predictions.columns:
        if col != "peptide":
            df[args.prediction_column_prefix + col] = predictions[col].values

    if args.out:
        df.to_csv(args.out, index=False)
        logging.info("Wrote: %s", args.out)
    else:
        df.to_csv(sys.stdout, index=False)
    return df
