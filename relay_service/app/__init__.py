"""HTTP entry point; run with `python -m relay_service.app`."""
