"""Audio buffers, capture and window segmentation."""
