#!/usr/bin/env python
"""
Marathon training tracker CLI runner.

Usage:
    python run.py status                 # show the training dashboard
    python run.py log 3 monday --distance 4.2 --duration 38:10
    python run.py clear 3 monday         # remove a logged workout
    python run.py insights               # show training insights
    python run.py dismiss <insight-id>   # hide an insight
    python run.py sync                   # pull runs from strava
    python run.py auth                   # run strava oauth flow
    python run.py export                 # write analytics json
    python run.py visualize              # generate charts
"""

import sys
from pathlib import Path

# add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from marathon_tracker.main import main

if __name__ == "__main__":
    main()
