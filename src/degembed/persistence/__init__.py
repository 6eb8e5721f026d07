from .provenance import ProvenanceTracker

__all__ = ["ProvenanceTracker"]
