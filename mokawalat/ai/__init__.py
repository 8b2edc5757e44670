"""AI assist flows backed by a hosted Gemini model."""
