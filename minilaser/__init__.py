"""
minilaser drives a small 1024x1024 serial laser engraver: SVG shapes and bitmaps are compiled into 4 byte motion
commands and streamed in acknowledged 1024 byte buffers.
"""
