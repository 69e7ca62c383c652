from pathlib import Path
import os
import sys

try:
    from dotenv import load_dotenv
except Exception:
    load_dotenv = None

# Ensure the src directory is on sys.path when running as a script
_SRC_DIR = Path(__file__).resolve().parents[1]
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from bloodpact.bootstrap import configure_logging, create_runtime
from bloodpact.infrastructure.serialization.world_codec import WorldFormatError
from bloodpact.presentation.cli import run

if load_dotenv is not None:
    load_dotenv()


def _print_help_surface() -> None:
    print("\nHelp:")
    print("- Run `python -m bloodpact --help` for the available options.")
    print("- World files: pass --world with a JSON file, or omit it for the built-in arena.")
    print("- Startup issues: verify BLOODPACT_DATABASE_URL or unset it to keep snapshots in memory.")


def main(argv=None):
    configure_logging()
    try:
        runtime = create_runtime()
        run(runtime, argv)
    except KeyboardInterrupt:
        print("\nSession ended.")
    except (OSError, WorldFormatError) as exc:
        print("Could not load the world file.")
        print(f"Reason: {exc}")
        _print_help_surface()
    except Exception as exc:
        if os.getenv("BLOODPACT_DATABASE_URL"):
            print("Snapshot database was configured; check that it is reachable.")
        print("An unexpected error occurred. The simulation closed safely.")
        print(f"Reason: {exc}")
        _print_help_surface()


if __name__ == "__main__":
    main()
