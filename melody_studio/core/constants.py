"""Global constants for Melody Studio."""

# Pitch names
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Audio processing defaults
DEFAULT_SR = 44100
DEFAULT_WINDOW_SIZE = 2048
DEFAULT_HOP_LENGTH = 512
WAVEFORM_POINTS = 240
WAVEFORM_GAIN = 6.5

# Pitch tracking
VOICE_FMIN = 80.0
VOICE_FMAX = 1000.0
SILENCE_THRESHOLD = 0.01
CORRELATION_THRESHOLD = 0.25
MEDIAN_WINDOW = 5
MIN_NOTE_FRAMES = 3

# Musical defaults
DEFAULT_TEMPO = 100.0
MIN_BPM = 40.0
MAX_BPM = 240.0
DEFAULT_REVERB_MIX = 18.0

# Note editing
MAX_SEMITONE_OFFSET = 24
SWING_MIN_GAP = 0.04

# Rendering
MIN_SEGMENT_DURATION = 0.01
RENDER_TAIL_SECONDS = 0.02
DELAY_BEAT_FRACTION = 0.375
PRESENCE_FREQ_HZ = 3600.0
PIANO_TAIL_SECONDS = 0.8
PIANO_PEAK = 0.95

# Snapshots
SNAPSHOT_HISTORY_LIMIT = 20
