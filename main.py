"""Voice Studio API Server - Main Entry Point."""

from voice_studio.server import main

if __name__ == "__main__":
    main()
