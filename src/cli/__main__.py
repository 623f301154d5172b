"""Allow `python -m src.cli`."""
from src.cli.main import main

main()
