"""Script para executar o RestClientMulti a partir do repositório."""

import sys
from pathlib import Path

src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from rest_client.cli.run_multi import main

if __name__ == "__main__":
    sys.exit(main())
