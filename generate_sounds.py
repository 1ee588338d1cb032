import os
import numpy as np
import soundfile as sf

SAMPLE_RATE = 44100


def _write_wav(filename, track, sr=SAMPLE_RATE):
    track = track / np.max(np.abs(track))  # normalize

    # Ensure output directory exists and save WAV file (16-bit PCM)
    out_dir = os.path.dirname(os.path.abspath(filename))
    if out_dir and not os.path.exists(out_dir):
        os.makedirs(out_dir, exist_ok=True)
    sf.write(filename, track.astype(np.float32), sr, subtype='PCM_16')


def generate_shoot_cue(filename, duration_seconds=0.18, sr=SAMPLE_RATE):
    t = np.linspace(0, duration_seconds, int(sr * duration_seconds), endpoint=False)

    # --- Descending chirp (900 Hz -> 300 Hz) ---
    freq = np.linspace(900, 300, len(t))
    phase = 2 * np.pi * np.cumsum(freq) / sr
    chirp = np.sin(phase)

    # --- Fast attack, exponential decay ---
    envelope = np.exp(-18 * t)
    envelope[: int(0.005 * sr)] *= np.linspace(0, 1, int(0.005 * sr))

    _write_wav(filename, 0.6 * chirp * envelope, sr)


def generate_pop_cue(filename, duration_seconds=0.12, sr=SAMPLE_RATE, seed=0):
    rng = np.random.default_rng(seed)
    t = np.linspace(0, duration_seconds, int(sr * duration_seconds), endpoint=False)

    # --- Short noise burst for the "pop" ---
    noise = rng.standard_normal(len(t)) * np.exp(-60 * t)

    # --- Plucky tone underneath ---
    tone = 0.5 * np.sin(2 * np.pi * 650 * t) * np.exp(-30 * t)

    _write_wav(filename, 0.4 * noise + tone, sr)


if __name__ == "__main__":
    # Save into project assets/sounds relative to this file
    project_root = os.path.dirname(os.path.abspath(__file__))
    sounds_dir = os.path.join(project_root, "assets", "sounds")
    generate_shoot_cue(os.path.join(sounds_dir, "shoot.wav"))
    generate_pop_cue(os.path.join(sounds_dir, "pop.wav"))
