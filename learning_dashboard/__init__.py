"""Learning Dashboard - learner records API and dashboard client."""
