"""HTTP surface for the Semantic Atom Kernel."""
