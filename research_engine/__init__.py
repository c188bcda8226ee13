"""Research Engine: deterministic 3D layout backend for citation graphs."""
