"""Audio format constants shared by the decoder and the whisper gateways."""

SAMPLE_RATE = 16000  # whisper.cpp expects 16 kHz mono float32
