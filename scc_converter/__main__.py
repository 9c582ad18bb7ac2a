"""Package entry point for ``python -m scc_converter``.

WHY: Users run the converter as ``python -m scc_converter input.scc``
without installing the console script.

HOW: Delegates to the CLI's main() function.
"""

from scc_converter.cli import main

if __name__ == "__main__":
    main()
