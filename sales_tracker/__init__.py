"""Console entry point for the sales tracker."""
