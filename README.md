# auxsig

`auxsig` is a library of audio signal objects and functions that work on them.
It has tone and noise generators, statistics, windows and envelopes, array
grouping and arithmetic, FFT and Hilbert tools, linear filtering, C-style
formatted text output, JSON loading, and time sequences with time stretching.

## Installation

```
pip install .
```

To include the test dependencies, use `pip install .[test]`. Then run `pytest`.

## The `Signal` object

`auxsig.signal.Signal` is a dataclass with these fields:

- `buf`: the samples as a one-dimensional NumPy array. The array may hold
  floats, complex numbers or booleans.
- `fs`: the sampling rate. A value above 1 marks audio.
- `n_groups`: the number of rows the buffer is split into.
- `tmark`: the start time of the segment in milliseconds.
- `temporal`: marks a time sequence.
- `chain`: the next time segment.
- `next`: the right channel of a stereo signal.
- `text`: the contents of a string object.
- `strut`: a dict of named members.
- `cell`: a list of items.

A signal has the following methods:

- Type checks: `is_empty`, `is_audio`, `is_vector`, `is_scalar`, `is_string`,
  `is_stereo`, `is_bool` and `is_tseq`.
- `columns()`: the number of samples in one row.
- `chains()`: yields the segments of the chain.
- `count_chains()`: counts those segments.

The functions return new signals and leave their arguments unchanged.
Durations and times are in milliseconds. Invalid arguments raise `ValueError`.

## Modules

| Module | Functions |
| --- | --- |
| `auxsig.signal` | `Signal`, `veq`, `to_audio`, `to_vector`, `left`, `right`, `set_next_chan` |
| `auxsig.generators` | `tone`, `noise`, `gnoise`, `silence`, `dc`, `rand`, `irand`, `randperm` |
| `auxsig.stats` | `maximum`, `minimum`, `nanmax`, `nanmin`, `total`, `mean`, `stdev`, `nansum`, `nanmean`, `nanstdev`, `length`, `size`, `rms`, `begint`, `endt`, `dur` |
| `auxsig.windowing` | `ramp`, `hamming`, `blackman`, `hann`, `sam` |
| `auxsig.arrays` | `group`, `ungroup`, `ones`, `zeros`, `diff`, `cumsum`, `all_true`, `any_true`, `logical_and`, `logical_or`, `sort`, `atmost`, `atleast`, `power`, `mod` |
| `auxsig.spectral` | `fft`, `ifft`, `hilbert`, `envelope`, `movespec` |
| `auxsig.filters` | `filt`, `filtfilt`, `conv` |
| `auxsig.textio` | `process_escapes`, `sprintf`, `printf`, `fprintf`, `load_json` |
| `auxsig.timeseq` | `tsq_getvalues`, `tsq_gettimes`, `tsq_isrel`, `tsq_setvalues`, `tsq_settimes`, `time_argument`, `timestretch` |

Notes on particular functions:

- **Random numbers.** `noise`, `gnoise`, `rand`, `irand` and `randperm` take an
  optional `numpy.random.Generator` as `rng`. Pass one to get reproducible
  output.
- **`tone`.** Takes one frequency, or two frequencies for a glide. Its `phase`
  argument is in cycles.
- **Extremes.** `maximum`, `minimum`, `nanmax` and `nanmin` return the values
  and the one-based indices as a pair of signals.
- **Filtering.** `filt` and `filtfilt` return the filtered signal and the
  final filter state.
- **`rms`.** Gives the level in dB. A full-scale sinusoid reads about 0 dB.
- **`load_json`.** Reads a file holding a JSON object and returns a struct
  signal:
  - objects become `strut`,
  - arrays become `cell`,
  - strings become `text`,
  - numbers become single-precision scalars,
  - booleans become logical scalars.
- **`timestretch`.** Changes the duration of audio without changing its pitch.
  It takes a number or a time sequence of ratios. A ratio of 2 makes the audio
  twice as long.

## Example

```python
from auxsig.generators import tone
from auxsig.windowing import ramp
from auxsig.stats import rms
from auxsig.filters import filt

x = tone(440.0, 500.0, 22050, 0.0)    # 500 ms, 440 Hz
x = ramp(x, 20.0)                      # 20 ms onset/offset ramps
level = rms(x)                         # level in dB
y, state = filt(x, [0.5, 0.5], [1.0], None)
```

## What it does not do

`auxsig` is a library of functions only. It has no command-line program and no
expression language or interpreter.

It does not cover:

- reading, writing, playing or recording audio files or devices,
- resampling, pitch shifting or speed changes,
- designing IIR filters from cut-off frequencies.

For filtering, supply the filter coefficients to `filt` or `filtfilt` yourself.