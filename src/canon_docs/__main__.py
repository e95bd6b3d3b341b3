"""Allow ``python -m canon_docs``."""

from canon_docs.cli import main

main()
