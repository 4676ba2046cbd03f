"""python -m psbuild"""

from psbuild.cli import main

if __name__ == "__main__":
    main()
