import sys

from perspkit.cli import main

if __name__ == '__main__':
    sys.exit(main())
