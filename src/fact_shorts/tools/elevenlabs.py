"""ElevenLabs TTS — async speech synthesis returning raw audio bytes."""

from __future__ import annotations

import structlog
from elevenlabs import AsyncElevenLabs

from fact_shorts.config import Settings, settings as default_settings
from fact_shorts.errors import SpeechSynthesisError

logger = structlog.get_logger()

_OUTPUT_FORMATS = {
    "mp3": "mp3_44100_128",
    "pcm": "pcm_44100",
}


class ElevenLabsSynthesizer:
    def __init__(self, client: AsyncElevenLabs | None = None, settings: Settings | None = None):
        self._settings = settings or default_settings
        self._client = client or AsyncElevenLabs(api_key=self._settings.elevenlabs_api_key)

    async def synthesize(self, text: str, voice: str, fmt: str = "mp3") -> bytes:
        """Convert *text* to speech with the given voice.

        Raises:
            SpeechSynthesisError: On API failure or when no audio comes back.
        """
        if fmt not in _OUTPUT_FORMATS:
            raise SpeechSynthesisError(f"Unsupported audio format: {fmt}")

        logger.info("elevenlabs_tts.start", voice_id=voice, text_len=len(text), fmt=fmt)

        try:
            audio_iter = self._client.text_to_speech.convert(
                voice_id=voice,
                text=text,
                model_id=self._settings.tts_model,
                output_format=_OUTPUT_FORMATS[fmt],
            )
            chunks: list[bytes] = []
            async for chunk in audio_iter:
                chunks.append(chunk)
        except Exception as exc:
            raise SpeechSynthesisError(f"Speech synthesis failed: {exc}") from exc

        audio_data = b"".join(chunks)
        if not audio_data:
            raise SpeechSynthesisError(f"ElevenLabs returned empty audio for voice_id={voice}")

        logger.info("elevenlabs_tts.done", bytes=len(audio_data))
        return audio_data
