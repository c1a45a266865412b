"""
Animated GIF inspection API - FastAPI web server
"""

import logging
import os
from io import BytesIO
from typing import Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .config import CodecConfig, parse_size
from .frames import AnimatedFrameSequence
from .gif_decoder import decode
from .transformer import transform

logger = logging.getLogger(__name__)

# Configuration
MAX_UPLOAD_BYTES = int(os.environ.get("ANIMATED_GIF_MAX_UPLOAD_BYTES", str(20 * 1024 * 1024)))
DEFAULT_DURATION = int(os.environ.get("ANIMATED_GIF_DEFAULT_DURATION", "100"))

CONFIG = CodecConfig(default_duration=DEFAULT_DURATION)

app = FastAPI(title="Animated GIF Frames")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def summarize(sequence: AnimatedFrameSequence) -> dict:
    width, height = sequence.size
    return {
        "width": width,
        "height": height,
        "frame_count": sequence.frame_count(),
        "durations": [frame.duration for frame in sequence],
        "total_duration": sequence.total_duration(),
        "loop_count": sequence.loop_count,
    }


async def load_sequence(
    file: UploadFile, size: Optional[str], scale: float
) -> AnimatedFrameSequence:
    """Decode an uploaded GIF and apply the optional scale-and-crop."""
    content = await file.read()
    if not content:
        raise ValueError("Uploaded file is empty.")
    if len(content) > MAX_UPLOAD_BYTES:
        raise ValueError(f"Uploaded file exceeds {MAX_UPLOAD_BYTES} bytes.")
    sequence = decode(content, CONFIG)
    if size:
        sequence = transform(sequence, parse_size(size), scale, CONFIG)
    return sequence


@app.get("/api/health")
def health_check():
    return {"status": "healthy", "version": "1.0.0"}


@app.post("/api/inspect")
async def inspect_endpoint(
    file: UploadFile = File(...),
    size: Optional[str] = Form(None),
    scale: float = Form(1.0),
):
    """Decode an uploaded GIF and describe its frames."""
    try:
        sequence = await load_sequence(file, size, scale)
        return summarize(sequence)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except Exception as e:
        logger.exception("Error inspecting GIF")
        return JSONResponse(status_code=500, content={"error": f"Failed to inspect GIF: {str(e)}"})


@app.post("/api/frame/{index}")
async def frame_endpoint(
    index: int,
    file: UploadFile = File(...),
    size: Optional[str] = Form(None),
    scale: float = Form(1.0),
):
    """Return one (optionally scaled and cropped) frame of an uploaded GIF as PNG."""
    try:
        sequence = await load_sequence(file, size, scale)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except Exception as e:
        logger.exception("Error decoding GIF")
        return JSONResponse(status_code=500, content={"error": f"Failed to decode GIF: {str(e)}"})

    try:
        frame = sequence.frame(index)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))

    output = BytesIO()
    frame.image.save(output, format="PNG")
    return Response(
        content=output.getvalue(),
        media_type="image/png",
        headers={"X-Frame-Duration": str(frame.duration)},
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
