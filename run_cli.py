#!/usr/bin/env python3

from krystal.cli.app import main

if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nStopped by user")
