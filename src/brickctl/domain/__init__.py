"""Domain model: brick locations, descriptors and manifests."""
