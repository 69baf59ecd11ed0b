from structura.cli.formatting.output import ConsoleOutput
from structura.cli.formatting.progress import ProgressBar

__all__ = ["ConsoleOutput", "ProgressBar"]
