"""Entry point for maillog-events: extract typed events from Postfix mail logs."""

from maillog.cli import main

if __name__ == "__main__":
    main()
