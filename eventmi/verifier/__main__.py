"""Entry point for ``python -m eventmi.verifier``."""

from eventmi.verifier.cli import app

if __name__ == "__main__":
    app(prog_name="eventmi-verify")
