# Custom Elastic Transcoder presets created by the Presets resource. Keys are
# the response data names, "Name" is also how delete finds them again.

_THUMBNAILS = {
    "Format": "png",
    "Interval": "60",
    "MaxWidth": "192",
    "MaxHeight": "108",
    "SizingPolicy": "ShrinkToFit",
    "PaddingPolicy": "NoPad",
}

_H264_OPTIONS = {
    "Profile": "main",
    "Level": "3.1",
    "MaxReferenceFrames": "3",
    "InterlacedMode": "Progressive",
    "ColorSpaceConversionMode": "None",
}

_AAC_AUDIO = {
    "Codec": "AAC",
    "SampleRate": "48000",
    "BitRate": "160",
    "Channels": "2",
    "CodecOptions": {"Profile": "AAC-LC"},
}


def _video(bit_rate: str, width: str, height: str, keyframes: str = "90") -> dict:
    return {
        "Codec": "H.264",
        "CodecOptions": dict(_H264_OPTIONS),
        "KeyframesMaxDist": keyframes,
        "FixedGOP": "true",
        "BitRate": bit_rate,
        "FrameRate": "30",
        "MaxWidth": width,
        "MaxHeight": height,
        "DisplayAspectRatio": "auto",
        "SizingPolicy": "ShrinkToFit",
        "PaddingPolicy": "NoPad",
    }


PRESETS = {
    "Mp4_1080p": {
        "Name": "vod-mp4-1080p",
        "Description": "Video on Demand MP4 1080p",
        "Container": "mp4",
        "Video": _video("5400", "1920", "1080"),
        "Audio": dict(_AAC_AUDIO),
        "Thumbnails": dict(_THUMBNAILS),
    },
    "Mp4_720p": {
        "Name": "vod-mp4-720p",
        "Description": "Video on Demand MP4 720p",
        "Container": "mp4",
        "Video": _video("2400", "1280", "720"),
        "Audio": dict(_AAC_AUDIO),
        "Thumbnails": dict(_THUMBNAILS),
    },
    "Hls_720p": {
        "Name": "vod-hls-720p",
        "Description": "Video on Demand HLS 720p",
        "Container": "ts",
        "Video": _video("2400", "1280", "720"),
        "Audio": dict(_AAC_AUDIO),
        "Thumbnails": dict(_THUMBNAILS),
    },
    "Dash_720p": {
        "Name": "vod-dash-720p",
        "Description": "Video on Demand DASH 720p video",
        "Container": "fmp4",
        "Video": _video("2400", "1280", "720", keyframes="60"),
        "Thumbnails": dict(_THUMBNAILS),
    },
    "Dash_Audio": {
        "Name": "vod-dash-audio",
        "Description": "Video on Demand DASH 160k audio",
        "Container": "fmp4",
        "Audio": dict(_AAC_AUDIO),
    },
}
