"""Text, image, and multimodal moderation against Azure Content Safety."""
