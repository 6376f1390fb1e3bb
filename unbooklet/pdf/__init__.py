"""PDF processing for scanned booklets.

Primary public entry point:
    ``run_booklet_pipeline`` walks a folder of booklet scans one document at a
    time and, for each ``name.pdf``:
      1. Rasterizes every page with PyMuPDF.
      2. Crops each raster into left and right halves with Pillow, naming each
         half by its position in reading order.
      3. Reassembles the halves, in order, into ``name-processed.pdf``.

Rendering, cropping and assembly sit behind small protocols (see
``runner.py``) so each can be replaced independently.
"""

from .runner import (
    BookletPipeline,
    PdfPipelineConfig,
    PipelineState,
    RunSummary,
    collect_documents,
    run_booklet_pipeline,
)


__all__ = [
    "BookletPipeline",
    "PdfPipelineConfig",
    "PipelineState",
    "RunSummary",
    "collect_documents",
    "run_booklet_pipeline",
]
