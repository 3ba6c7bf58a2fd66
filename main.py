import sys

from rich.pretty import pprint

from argosy import *

__prog__ = "argosy-demo"

verbose = add_global_flag("verbose", "v", help="print the parser state after parsing")


def build():
    parser = Parser()
    parser.add_arg("jobs", "j", help="worker count", type=int).default(1).options(range(1, 9))
    parser.add_multi_arg("tag", "t", help="labels to attach")
    parser.add_arg("ratio", help="mixing ratio", type=float)
    parser.add_positional_arg("input file").required()
    parser.enable_free_args()
    return parser


if __name__ == '__main__':
    parser = build()

    if "--help" in sys.argv[1:]:
        parser.print_help()
        sys.exit(0)

    try:
        parser.parse_args(sys.argv, tail_marker="--")
    except ParserError as error:
        report(error)
        sys.exit(2)

    if verbose:
        pprint(parser)
