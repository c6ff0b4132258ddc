# main.py
import os, sys

def main():
    # -t: read descriptors from ./testdir and run the test variant of the worker
    in_test_mode = len(sys.argv) > 1 and sys.argv[1] == "-t"
    if not in_test_mode and os.geteuid() != 0:
        print("ERROR: The installer must be run as root.", file=sys.stderr)
        sys.exit(1)

    from config import load_config
    from environment import SetupError, load_context
    from logger import log

    config = load_config(in_test_mode)
    try:
        context = load_context(config)
    except SetupError as e:
        log.error("Installer setup failed: %s", e)
        from app import SetupErrorApp
        SetupErrorApp(str(e)).run()
        sys.exit(1)

    from app import InstallerApp
    InstallerApp(context).run()
    sys.exit(0)

if __name__ == "__main__":
    main()
