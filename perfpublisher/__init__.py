"""Publishing of Gatling load test results: report selection, trend graphs, build verdicts."""
