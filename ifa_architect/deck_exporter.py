import logging
import os
import re
from pathlib import Path
from typing import Iterable, Optional, Sequence

from pptx import Presentation
from pptx.chart.data import CategoryChartData
from pptx.dml.color import RGBColor
from pptx.enum.chart import XL_CHART_TYPE, XL_LEGEND_POSITION
from pptx.util import Inches, Pt

from ifa_architect import config
from ifa_architect.models import PresentationData
from ifa_architect.normalizer import (
    NOTHING_TO_SELL,
    Chart,
    CompsView,
    DisclaimerView,
    GenericView,
    MarketGrowthView,
    RebalanceView,
    ScenarioView,
    SlideView,
    TitleView,
    normalize_slide,
)

logger = logging.getLogger(__name__)

SLIDE_WIDTH = Inches(13.333)
SLIDE_HEIGHT = Inches(7.5)
BLANK_LAYOUT = 6
FOOTER_TEXT = "CONFIDENTIAL & PROPRIETARY. For client review only."

NAVY = RGBColor(0x1E, 0x3A, 0x8A)
GREY = RGBColor(0x64, 0x74, 0x8B)
SELL_RED = RGBColor(0xDC, 0x26, 0x26)
BUY_BLUE = RGBColor(0x25, 0x63, 0xEB)

_INVALID_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|]')


def deck_filename(client_name: str) -> str:
    """Proposal_<clientName>.pptx with path-unsafe characters replaced by '_'."""
    return f"Proposal_{_INVALID_FILENAME_CHARS.sub('_', client_name or 'client')}.pptx"


def _hex(color: str) -> RGBColor:
    return RGBColor.from_string(color.lstrip("#").upper())


def _textbox(slide, left, top, width, height, text: str, size: int = 14,
             bold: bool = False, color: Optional[RGBColor] = None):
    box = slide.shapes.add_textbox(left, top, width, height)
    frame = box.text_frame
    frame.word_wrap = True
    frame.text = text or ""
    for paragraph in frame.paragraphs:
        paragraph.font.size = Pt(size)
        paragraph.font.bold = bold
        if color is not None:
            paragraph.font.color.rgb = color
    return box


def _lines(slide, left, top, width, height, lines: Iterable[str], size: int = 14,
           color: Optional[RGBColor] = None):
    box = slide.shapes.add_textbox(left, top, width, height)
    frame = box.text_frame
    frame.word_wrap = True
    for i, line in enumerate(lines):
        p = frame.paragraphs[0] if i == 0 else frame.add_paragraph()
        p.text = line
        p.font.size = Pt(size)
        if color is not None:
            p.font.color.rgb = color
    return box


def _table(slide, left, top, width, header: Sequence[str], rows: Sequence[Sequence[str]]):
    shape = slide.shapes.add_table(len(rows) + 1, len(header), left, top, width, Inches(0.4) * (len(rows) + 1))
    table = shape.table
    for col, text in enumerate(header):
        table.cell(0, col).text = text
    for r, row in enumerate(rows, start=1):
        for col, text in enumerate(row):
            cell = table.cell(r, col)
            cell.text = text
            cell.text_frame.paragraphs[0].font.size = Pt(12)
    return shape


def _chart(slide, chart: Chart, left, top, width, height):
    data = CategoryChartData()
    data.categories = [p.name for p in chart.points]
    data.add_series("", [p.value for p in chart.points])
    chart_type = XL_CHART_TYPE.PIE if chart.kind == "pie" else XL_CHART_TYPE.COLUMN_CLUSTERED
    graphic = slide.shapes.add_chart(chart_type, left, top, width, height, data).chart
    if chart.kind == "pie":
        graphic.has_legend = True
        graphic.legend.position = XL_LEGEND_POSITION.RIGHT
        graphic.legend.include_in_layout = False
        for point, styled in zip(graphic.plots[0].series[0].points, chart.points):
            point.format.fill.solid()
            point.format.fill.fore_color.rgb = _hex(styled.color)
    else:
        graphic.has_legend = False
    return graphic


def _header(slide, view: SlideView):
    _textbox(slide, Inches(0.5), Inches(0.3), Inches(12.3), Inches(0.8), view.title, size=28, bold=True, color=NAVY)
    if view.subtitle:
        _textbox(slide, Inches(0.5), Inches(1.0), Inches(12.3), Inches(0.5), view.subtitle, size=16, color=GREY)


def _footer(slide, view: SlideView):
    if view.sources_line:
        _textbox(slide, Inches(0.5), Inches(6.6), Inches(12.3), Inches(0.3), f"Source: {view.sources_line}", size=9, color=GREY)
    _textbox(slide, Inches(0.5), Inches(6.95), Inches(12.3), Inches(0.3), FOOTER_TEXT, size=9, color=GREY)


# ---------------------------------------------------------------------------
# Per-view rendering
# ---------------------------------------------------------------------------

def _render_title(slide, view: TitleView, client_name: str):
    _textbox(slide, Inches(1), Inches(2.5), Inches(11.3), Inches(1.2), view.title, size=40, bold=True, color=NAVY)
    _textbox(slide, Inches(1), Inches(3.8), Inches(11.3), Inches(0.6), view.subtitle or "", size=20, color=GREY)
    _textbox(slide, Inches(1), Inches(4.6), Inches(11.3), Inches(0.6), f"{client_name} 様", size=18)


def _render_disclaimer(slide, view: DisclaimerView):
    _header(slide, view)
    _textbox(slide, Inches(0.8), Inches(1.6), Inches(11.7), Inches(4.5), view.body_text, size=12)


def _render_rebalance(slide, view: RebalanceView):
    _header(slide, view)
    top = Inches(1.6)
    if view.body_text:
        _textbox(slide, Inches(0.5), top, Inches(12.3), Inches(0.8), view.body_text, size=14)
        top = Inches(2.5)
    _textbox(slide, Inches(0.5), top, Inches(6), Inches(0.5), "売却 (Sell)", size=18, bold=True, color=SELL_RED)
    sell_lines = [f"{t.label}  {t.value}" for t in view.sell] if not view.nothing_to_sell else [NOTHING_TO_SELL]
    _lines(slide, Inches(0.5), top + Inches(0.5), Inches(6), Inches(3.5), sell_lines)
    _textbox(slide, Inches(6.8), top, Inches(6), Inches(0.5), "購入 (Buy)", size=18, bold=True, color=BUY_BLUE)
    _lines(slide, Inches(6.8), top + Inches(0.5), Inches(6), Inches(3.5), [f"{t.label}  {t.value}" for t in view.buy])


def _render_scenario(slide, view: ScenarioView):
    _header(slide, view)
    _textbox(slide, Inches(0.5), Inches(1.6), Inches(12.3), Inches(0.8), view.body_text, size=14)
    if not view.points:
        return
    data = CategoryChartData()
    data.categories = [p.name for p in view.points]
    data.add_series("", [p.value for p in view.points])
    graphic = slide.shapes.add_chart(
        XL_CHART_TYPE.COLUMN_CLUSTERED, Inches(1.5), Inches(2.5), Inches(10), Inches(4), data
    ).chart
    graphic.has_legend = False
    for point, styled in zip(graphic.plots[0].series[0].points, view.points):
        point.format.fill.solid()
        point.format.fill.fore_color.rgb = _hex(styled.color)


def _render_comps(slide, view: CompsView):
    _header(slide, view)
    _textbox(slide, Inches(0.5), Inches(1.6), Inches(12.3), Inches(0.8), view.body_text, size=14)
    if view.rows:
        rows = [(r.metric, r.label, r.value1, r.value2, r.explanation or "") for r in view.rows]
        _table(slide, Inches(0.5), Inches(2.5), Inches(12.3), ("指標", "項目", "提案銘柄", "競合他社", "乖離理由"), rows)


def _render_market_growth(slide, view: MarketGrowthView):
    _header(slide, view)
    if view.body_text:
        _textbox(slide, Inches(0.5), Inches(1.6), Inches(12.3), Inches(0.8), view.body_text, size=14)
    if view.key_drivers:
        _lines(slide, Inches(0.5), Inches(2.5), Inches(5.5), Inches(3.8), [f"• {d}" for d in view.key_drivers])
    if view.growth_bars:
        _chart(slide, Chart("bar", view.growth_bars), Inches(6.3), Inches(2.5), Inches(6.5), Inches(3.8))


def _render_generic(slide, view: GenericView):
    _header(slide, view)
    top = Inches(1.6)
    if view.body_text:
        _textbox(slide, Inches(0.5), top, Inches(12.3), Inches(0.8), view.body_text, size=14)
        top = Inches(2.5)
    left_width = Inches(6) if (view.chart or view.table) else Inches(12.3)
    if view.numbered_points:
        _lines(slide, Inches(0.5), top, left_width, Inches(3), [f"{n}. {text}" for n, text in view.numbered_points])
    if view.chart and view.table:
        # right column: chart on top, table underneath
        _chart(slide, view.chart, Inches(6.8), top, Inches(6), Inches(1.9))
        _table(slide, Inches(6.8), top + Inches(2.0), Inches(6), ("項目", "値"), view.table)
    elif view.chart:
        _chart(slide, view.chart, Inches(6.8), top, Inches(6), Inches(3.5))
    elif view.table:
        _table(slide, Inches(6.8), top, Inches(6), ("項目", "値"), view.table)
    _textbox(slide, Inches(0.5), Inches(5.8), Inches(12.3), Inches(0.7), view.insight, size=12, color=NAVY)


def render_slide(prs, view: SlideView, client_name: str):
    slide = prs.slides.add_slide(prs.slide_layouts[BLANK_LAYOUT])
    if isinstance(view, TitleView):
        _render_title(slide, view, client_name)
    elif isinstance(view, DisclaimerView):
        _render_disclaimer(slide, view)
    elif isinstance(view, RebalanceView):
        _render_rebalance(slide, view)
    elif isinstance(view, ScenarioView):
        _render_scenario(slide, view)
    elif isinstance(view, CompsView):
        _render_comps(slide, view)
    elif isinstance(view, MarketGrowthView):
        _render_market_growth(slide, view)
    else:
        _render_generic(slide, view)
    _footer(slide, view)
    return slide


def export_deck(presentation: PresentationData, output_dir: Optional[str] = None) -> Path:
    """
    Writes the proposal as a 16:9 PowerPoint deck, one slide per SlideContent,
    and returns the file path.
    """
    output_dir = output_dir or config.EXPORT_DIR
    os.makedirs(output_dir, exist_ok=True)
    path = Path(output_dir) / deck_filename(presentation.client_name)

    prs = Presentation()
    prs.slide_width = SLIDE_WIDTH
    prs.slide_height = SLIDE_HEIGHT
    for slide in presentation.slides:
        render_slide(prs, normalize_slide(slide), presentation.client_name)

    prs.save(str(path))
    logger.info(f"Exported {len(presentation.slides)} slides to {path}")
    return path
