"""Tests for WhisperTranscriber gateway — patches pywhispercpp.model.Model and the decoder."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from hushnote.l1_entities.audio_constants import SAMPLE_RATE

MODULE = 'hushnote.l3_interface_adapters.gateways.whisper_transcriber'


def _seg(text: str) -> MagicMock:
    seg = MagicMock()
    seg.text = text
    return seg


@patch(f'{MODULE}.os.close')
@patch(f'{MODULE}.os.dup2')
@patch(f'{MODULE}.os.dup')
@patch(f'{MODULE}.os.open', return_value=99)
class TestSuppressCStdout:
    def test_redirects_and_restores_fds(self, mock_open, mock_dup, mock_dup2, mock_close):
        from hushnote.l3_interface_adapters.gateways.whisper_transcriber import (
            _suppress_c_stdout,  # noqa: PLC2701 -- testing private helper
        )

        mock_dup.side_effect = [10, 11]

        with _suppress_c_stdout():
            pass

        assert mock_dup2.call_count == 4  # 2 redirects in + 2 restores out
        assert mock_close.call_count == 3


class TestSplitWindows:
    def test_exact_and_remainder_windows(self):
        from hushnote.l3_interface_adapters.gateways.whisper_transcriber import split_windows

        audio = np.zeros(SAMPLE_RATE * 45, dtype=np.float32)
        windows = split_windows(audio, 30.0)
        assert [len(w) for w in windows] == [SAMPLE_RATE * 30, SAMPLE_RATE * 15]

    def test_empty_audio(self):
        from hushnote.l3_interface_adapters.gateways.whisper_transcriber import split_windows

        assert split_windows(np.zeros(0, dtype=np.float32), 30.0) == []


@patch(f'{MODULE}.os.close')
@patch(f'{MODULE}.os.dup2')
@patch(f'{MODULE}.os.dup', return_value=10)
@patch(f'{MODULE}.os.open', return_value=99)
@patch(f'{MODULE}.Model')
class TestModelLifecycle:
    def test_load_model_args(self, mock_model_cls, _open, _dup, _dup2, _close):
        from hushnote.l3_interface_adapters.gateways.whisper_transcriber import WhisperTranscriber

        t = WhisperTranscriber()
        t.load_model('/path/to/model.bin')

        mock_model_cls.assert_called_once_with('/path/to/model.bin', print_progress=False, print_realtime=False)

    def test_close_releases_model(self, mock_model_cls, _open, _dup, _dup2, _close):
        from hushnote.l3_interface_adapters.gateways.whisper_transcriber import WhisperTranscriber

        t = WhisperTranscriber()
        t.load_model('/path/model.bin')
        t.close()
        assert t._model is None

    def test_close_without_model_is_noop(self, mock_model_cls, _open, _dup, _dup2, _close):
        from hushnote.l3_interface_adapters.gateways.whisper_transcriber import WhisperTranscriber

        t = WhisperTranscriber()
        t.close()
        assert t._model is None


class TestTranscribe:
    def test_raises_before_load(self, tmp_path: Path):
        from hushnote.l3_interface_adapters.gateways.whisper_transcriber import WhisperTranscriber

        with pytest.raises(RuntimeError, match='Model not loaded'):
            WhisperTranscriber().transcribe(tmp_path / 'a.wav')

    @patch(f'{MODULE}.os.close')
    @patch(f'{MODULE}.os.dup2')
    @patch(f'{MODULE}.os.dup', return_value=10)
    @patch(f'{MODULE}.os.open', return_value=99)
    @patch(f'{MODULE}.load_audio_file')
    @patch(f'{MODULE}.Model')
    def test_auto_language_one_segment_per_window(self, mock_model_cls, mock_load, _open, _dup, _dup2, _close):
        from hushnote.l3_interface_adapters.gateways.whisper_transcriber import WhisperTranscriber

        mock_load.return_value = np.zeros(SAMPLE_RATE * 45, dtype=np.float32)
        model = MagicMock()
        model.auto_detect_language.return_value = (('de', 0.93), {})
        model.transcribe.side_effect = [
            [_seg(' Guten Morgen. '), _seg('  ')],
            [_seg('Wie geht es?')],
        ]
        mock_model_cls.return_value = model

        t = WhisperTranscriber(language='auto', window_duration=30.0)
        t.load_model('/m.bin')
        segments = t.transcribe(Path('/audio/x.wav'))

        assert [s.text for s in segments] == ['Guten Morgen.', 'Wie geht es?']
        assert [s.language for s in segments] == ['de', 'de']
        assert [s.audio_seconds for s in segments] == [30.0, 15.0]
        assert model.transcribe.call_args.kwargs['language'] == 'de'
        mock_load.assert_called_once_with(Path('/audio/x.wav'))

    @patch(f'{MODULE}.os.close')
    @patch(f'{MODULE}.os.dup2')
    @patch(f'{MODULE}.os.dup', return_value=10)
    @patch(f'{MODULE}.os.open', return_value=99)
    @patch(f'{MODULE}.load_audio_file')
    @patch(f'{MODULE}.Model')
    def test_fixed_language_skips_detection(self, mock_model_cls, mock_load, _open, _dup, _dup2, _close):
        from hushnote.l3_interface_adapters.gateways.whisper_transcriber import WhisperTranscriber

        mock_load.return_value = np.zeros(SAMPLE_RATE * 5, dtype=np.float32)
        model = MagicMock()
        model.transcribe.return_value = [_seg('hello')]
        mock_model_cls.return_value = model

        t = WhisperTranscriber(language='en')
        t.load_model('/m.bin')
        segments = t.transcribe(Path('/audio/x.wav'))

        model.auto_detect_language.assert_not_called()
        assert segments[0].language == 'en'
        assert segments[0].audio_seconds == 5.0

    @patch(f'{MODULE}.os.close')
    @patch(f'{MODULE}.os.dup2')
    @patch(f'{MODULE}.os.dup', return_value=10)
    @patch(f'{MODULE}.os.open', return_value=99)
    @patch(f'{MODULE}.load_audio_file', side_effect=RuntimeError('No decodable audio in: x.wav'))
    @patch(f'{MODULE}.Model')
    def test_decode_failure_propagates(self, mock_model_cls, _load, _open, _dup, _dup2, _close):
        from hushnote.l3_interface_adapters.gateways.whisper_transcriber import WhisperTranscriber

        t = WhisperTranscriber()
        t.load_model('/m.bin')
        with pytest.raises(RuntimeError, match='No decodable audio'):
            t.transcribe(Path('/audio/x.wav'))
