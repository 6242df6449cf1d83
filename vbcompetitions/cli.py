"""Command line entry point for validating competition files."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from vbcompetitions import config
from vbcompetitions.exceptions import CompetitionError
from vbcompetitions.storage import CompetitionStore

logger = logging.getLogger(__name__)


def main(argv: Optional[list[str]] = None) -> int:
    """Validate a competition file, printing the result.

    Returns:
        0 if the file is valid, 1 otherwise
    """
    parser = argparse.ArgumentParser(prog='vbc-validate', description='Validate a volleyball competition JSON file')
    parser.add_argument('file', help='Competition JSON file')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=config.LOG_LEVEL.upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    path = Path(args.file)
    try:
        CompetitionStore(str(path.parent)).load(path.name)
    except CompetitionError as err:
        print()
        print('Errors found in file:')
        print()
        print(err)
        if err.__cause__ is not None:
            print(err.__cause__)
        return 1

    print('File is valid')
    return 0


if __name__ == '__main__':
    sys.exit(main())
