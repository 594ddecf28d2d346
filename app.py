"""
Segmentation Mask Comparator - Streamlit Application
比較多組分割遮罩結果與 Ground Truth 的 IOU 與準確率
"""
import logging

import streamlit as st

from segcompare import commands
from segcompare.analysis import (
    analyze_results, filter_cases, format_percentage, iou_status, ordered_labels,
    sort_cases, summarize_sources,
)
from segcompare.config import AnalysisDefaults, ResultLabels, configure_logging
from segcompare.models import ComparisonSource, ExportSelection

configure_logging(logging.INFO)

# Configure Streamlit page
st.set_page_config(
    page_title="分割遮罩比較器",
    page_icon="🧩",
    layout="wide",
    initial_sidebar_state="expanded"
)

STATUS_ICONS = {'success': '🟢', 'warning': '🟡', 'error': '🔴'}


def parse_sources(text: str):
    """Parse one 'label=path' comparison source per line."""
    sources = []
    for line in text.splitlines():
        label, sep, folder = line.strip().partition('=')
        if sep and label.strip() and folder.strip():
            sources.append(ComparisonSource(label=label.strip(), folder=folder.strip()))
    return sources


def main():
    """Main application entry point."""
    st.title("🧩 分割遮罩比較器")
    st.markdown("比較 **我的結果** 與其他對照實驗相對於 **Ground Truth** 的 IOU 與像素準確率")

    # Sidebar for folder paths
    with st.sidebar:
        st.header("📁 資料夾")
        original = st.text_input("原始影像資料夾")
        gt = st.text_input("Ground Truth 資料夾")
        mine = st.text_input("我的結果資料夾")
        sources_text = st.text_area("對照實驗（每行一個：名稱=路徑）")
        sources = parse_sources(sources_text)

        validate_clicked = st.button("✅ 驗證資料夾")

    if validate_clicked:
        folders = [original, gt, mine] + [source.folder for source in sources]
        result = commands.validate_folders(folders)
        st.session_state['validation'] = result
        st.session_state.pop('results', None)

    validation = st.session_state.get('validation')
    if validation is None:
        st.info("👈 請先在側邊欄輸入資料夾路徑並驗證")
        return

    if not validation.ok:
        st.error(f"❌ {validation.error}")
        return

    report = validation.value
    st.subheader("📋 驗證結果")
    col1, col2 = st.columns(2)
    with col1:
        st.metric("共同影像數", len(report.common_files))
    with col2:
        st.metric("狀態", "通過" if report.is_valid else "未通過")
    if report.missing_files:
        with st.expander("缺少的檔案"):
            for name, files in report.missing_files.items():
                st.write(f"**{name}**：{', '.join(files)}")
    if not report.is_valid:
        st.warning("⚠️ 所有資料夾沒有共同的影像")
        return

    if st.button("🔄 開始比較"):
        bar = st.progress(0.0, text="準備中...")
        channel = commands.ProgressChannel()
        channel.subscribe(lambda _, event: bar.progress(
            min(event.percentage / 100.0, 1.0), text=f"{event.current}/{event.total} {event.current_label}"))
        result = commands.compare_batch(gt, mine, sources, report.common_files,
                                        progress=channel, original_folder=original)
        st.session_state['results'] = result.value

    results = st.session_state.get('results')
    if not results:
        return

    st.subheader("📊 各來源平均分數")
    summary = summarize_sources(results)
    columns = st.columns(len(summary))
    for column, (label, stats) in zip(columns, summary.items()):
        with column:
            st.metric(f"{STATUS_ICONS[iou_status(stats['mean_iou'])]} {label}",
                      format_percentage(stats['mean_iou']),
                      help=f"準確率 {format_percentage(stats['mean_accuracy'])}")

    failed = [r for r in results if r.has_failures]
    if failed:
        with st.expander(f"⚠️ {len(failed)} 張影像的部分指標無法計算"):
            for r in failed:
                for label, messages in r.failures.items():
                    st.write(f"**{r.filename}** / {label}：{'; '.join(messages)}")

    st.subheader("🔍 案例分析")
    col_filter, col_sort, col_order = st.columns(3)
    with col_filter:
        filter_by = st.selectbox("篩選", ['all'] + AnalysisDefaults.CATEGORIES)
    with col_sort:
        sort_by = st.selectbox("排序", AnalysisDefaults.SORT_KEYS,
                               index=AnalysisDefaults.SORT_KEYS.index('primary_advantage'))
    with col_order:
        descending = st.checkbox("遞減排序", value=True)

    cases = sort_cases(filter_cases(analyze_results(results), filter_by), sort_by, descending)
    st.dataframe([
        {
            '檔名': case.filename,
            '類別': case.category,
            '平均 IOU': format_percentage(case.avg_iou),
            '我的 IOU': format_percentage(case.primary_iou),
            '優勢': f"{case.primary_advantage:+.3f}",
            '平均準確率': format_percentage(case.avg_accuracy),
        }
        for case in cases
    ])

    by_name = {r.filename: r for r in results}
    with st.expander("🖼️ 影像比較"):
        chosen = st.selectbox("影像", [case.filename for case in cases])
        if chosen:
            result = by_name[chosen]
            labels = ordered_labels(result.paths, ResultLabels.PRIMARY)
            image_columns = st.columns(len(labels))
            for column, label in zip(image_columns, labels):
                with column:
                    caption = label
                    if label in result.iou_scores and result.iou_scores[label] is not None:
                        caption += f" | IOU {format_percentage(result.iou_scores[label])}"
                    st.image(result.paths[label], caption=caption, width='stretch')

    # Export options
    st.subheader("💾 匯出影像")
    selected = st.multiselect("選擇要匯出的影像", [case.filename for case in cases])
    dest = st.text_input("匯出資料夾")
    if st.button("📥 匯出") and selected:
        selections = [ExportSelection.from_result(by_name[name]) for name in selected]
        export = commands.export_selected(dest, selections)
        if export.ok:
            st.success(f"✅ {export.value.message}")
        else:
            st.error(f"❌ {export.error}")


if __name__ == "__main__":
    main()
