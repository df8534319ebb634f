"""
Relay package __main__ entry point.

Allows running with: python -m relay
"""

from relay.app.relay import main

if __name__ == "__main__":
    main()
