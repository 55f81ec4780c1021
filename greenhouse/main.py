#!/usr/bin/env python3
"""
Greenhouse Simulator - console front end
"""

import sys

from greenhouse.controllers import GreenhouseController
from greenhouse.settings import load_settings


def show_help():
    """Display help menu"""
    print("""
==================================================
COMMANDS
==================================================
  s - Status          h - Help            q - Quit

  SIMULATION:
  1 - Start           p - Pause           r - Resume

  RECORDING (before start):
  w - Save run to file
  l - Play back a saved run
==================================================""")


def main(argv=None):
    """Main entry point"""
    argv = sys.argv[1:] if argv is None else argv

    print("\n" + "=" * 50)
    print("  GREENHOUSE SIMULATOR")
    print("=" * 50 + "\n")

    settings = load_settings(argv[0]) if argv else load_settings()
    controller = GreenhouseController(settings)
    show_help()

    running = True
    while running:
        try:
            cmd = input("\n> ").strip().lower()

            if not cmd:
                continue
            elif cmd == 'h':
                show_help()
            elif cmd == 'q':
                running = False
                print("\nExiting...")
            else:
                result = controller.handle_command(cmd)
                if result is None:
                    print("Unknown command. Press 'h' for help.")

        except (KeyboardInterrupt, EOFError):
            running = False
            print("\n\nExiting...")

    controller.close()
    print("[SYSTEM] Done.")


if __name__ == "__main__":
    main()
