"""giftune — size-budgeted video-to-GIF conversion."""
