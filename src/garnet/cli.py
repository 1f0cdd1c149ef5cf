"""Command-line interface for garnet.

Runs a script file, or standard input when no file is given. The home
directory comes from the GARNET_HOME environment variable, falling back to
`~/.garnet`; required files are searched in its `lib` directory.
"""

import argparse
import os
import pathlib
import sys

import garnet

# Parse trace entries shown when a script fails to parse
TRACE_LIMIT = 61


def home_directory(environ=None):
    """Resolve the garnet home directory from the environment."""
    environ = os.environ if environ is None else environ
    home = environ.get("GARNET_HOME")
    if home:
        return home
    return os.path.join(environ.get("HOME", str(pathlib.Path.home())), ".garnet")


def main(argv=None):
    """Run the command line.

    Args:
        argv: (list[str] | None) Arguments, defaults to sys.argv[1:]

    Returns:
        (int) Process exit code
    """
    parser = argparse.ArgumentParser(
        prog="garnet",
        description="Run a garnet (Ruby subset) script")
    parser.add_argument("file", nargs="?",
        help="Script to run, reads standard input when omitted")
    parser.add_argument("args", nargs=argparse.REMAINDER,
        help="Arguments exposed to the script as ARGV")
    parser.add_argument("-v", "--version", action="store_true",
        help="Print the program name and exit")
    parser.add_argument("-V", "--verbose", action="store_true",
        help="Accepted for compatibility, has no effect")
    parser.add_argument("--ast", action="store_true",
        help="Show the parsed syntax tree instead of running")
    args = parser.parse_args(argv)

    if args.version:
        print("garnet")
        return 0

    if args.file is None:
        filename = "STDIN"
        source = sys.stdin.read()
    else:
        filename = args.file
        try:
            source = pathlib.Path(filename).read_text(encoding="utf-8")
        except OSError as e:
            print(f"garnet: cannot read {filename}: {e.strerror}", file=sys.stderr)
            return 1

    if args.ast:
        try:
            nodes = garnet.parse(source, filename)
        except garnet.ParseError as e:
            return _report_parse_error(e)
        for node in nodes:
            node.tree()
        return 0

    vm = garnet.VM(home_directory(), filename, args.args)
    try:
        vm.run(source)
    except garnet.ParseError as e:
        return _report_parse_error(e)
    except garnet.RubyError as e:
        print(e.format(), file=sys.stderr)
        return 1
    return 0


def _report_parse_error(err):
    print(f"{err.filename}: {err.message}", file=sys.stderr)
    for entry in err.trace[-TRACE_LIMIT:]:
        print(entry, file=sys.stderr)
    return 1
