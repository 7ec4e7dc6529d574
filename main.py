import logging
import os
import sys

from engine.analyzer import Analyzer
from engine.signatures import default_definitions_path, load_definitions
from watcher.dispatcher import watch


def main():
    if len(sys.argv) != 2:
        print("Usage: python main.py <directory_to_watch>")
        sys.exit(1)

    watch_dir = sys.argv[1]

    # Debug flag: set DEBUG=1 to see every file-system event
    debug = os.getenv("DEBUG", "0") == "1"
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if not os.path.isdir(watch_dir):
        print(f"Error: Directory '{watch_dir}' not found.")
        sys.exit(1)

    definitions_path = default_definitions_path()
    try:
        signatures = load_definitions(definitions_path)
    except (OSError, ValueError) as exc:
        print(f"Error: Failed to load definitions from '{definitions_path}': {exc}")
        sys.exit(1)
    print(f"Loaded {len(signatures)} definitions")

    analyzer = Analyzer(signatures)

    try:
        watch(watch_dir, analyzer)
    except OSError as exc:
        print(f"Error: Failed to watch '{watch_dir}': {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
