#!/usr/bin/env python
# coding: utf-8

# Side length of a preprocessed frame
CROPPED_FRAME_SIZE = 84
CROPPED_FRAME_DATA_SIZE = CROPPED_FRAME_SIZE * CROPPED_FRAME_SIZE

# Frames forming one decision state
INPUT_FRAME_COUNT = 4
INPUT_DATA_SIZE = INPUT_FRAME_COUNT * CROPPED_FRAME_DATA_SIZE

MINIBATCH_SIZE = 32
MINIBATCH_DATA_SIZE = MINIBATCH_SIZE * INPUT_DATA_SIZE

# Full ALE action set
OUTPUT_COUNT = 18

REPLAY_MEMORY_CAPACITY = 500000

# Screen cropping
CROP_LEFT_COLUMNS = 8
CROP_HEIGHT_FRACTION = 0.92
