"""HTTP surface for the sales tracker."""
