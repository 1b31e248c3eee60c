"""Run the simulator with ``python -m transcription_sim``."""

from transcription_sim.main import run

if __name__ == "__main__":
    run()
