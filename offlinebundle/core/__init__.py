"""Core pipeline components: fetching, release resolution, assembly, packaging."""
