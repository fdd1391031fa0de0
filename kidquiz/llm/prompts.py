from kidquiz.models import OPTION_COUNT, Subject

QUESTION_SCHEMA = {
    "type": "object",
    "properties": {
        "questionText": {
            "type": "string",
            "description": "Nội dung câu hỏi, trình độ NÂNG CAO lớp 2 (dành cho học sinh giỏi).",
        },
        "options": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Danh sách 4 phương án trả lời (A, B, C, D).",
        },
        "correctAnswerIndex": {
            "type": "integer",
            "description": "Chỉ số của đáp án đúng trong mảng options (0, 1, 2 hoặc 3).",
        },
        "explanation": {
            "type": "string",
            "description": "Giải thích chi tiết cách giải, logic rõ ràng.",
        },
        "svgImage": {
            "type": "string",
            "description": (
                "Mã SVG đầy đủ (bắt đầu bằng <svg...>) minh họa cho câu hỏi. Bắt buộc với câu hỏi "
                "hình học, xem đồng hồ, cân nặng hoặc câu đố nhìn hình. Nếu không cần thì để trống."
            ),
        },
    },
    "required": ["questionText", "options", "correctAnswerIndex", "explanation"],
}

QUIZ_RESPONSE_FORMAT = {
    "type": "json_schema",
    "json_schema": {
        "name": "quiz",
        "schema": {
            "type": "object",
            "properties": {
                "questions": {"type": "array", "items": QUESTION_SCHEMA},
            },
            "required": ["questions"],
        },
    },
}

_SUBJECT_GUIDES = {
    Subject.MATH: """Yêu cầu chuyên môn môn Toán (Nâng cao):
- Tư duy logic: điền số vào dãy quy luật, bài toán trồng cây, bài toán xếp hàng.
- Bài toán có lời văn: dạng cần 2 bước tính trở lên.
- Hình học: đếm hình chồng lên nhau, ghép hình, tư duy không gian.
- Thời gian và đo lường: tính khoảng thời gian trôi qua, đổi đơn vị đo, xem lịch.
- Phép tính: tìm thành phần chưa biết (x), tính nhanh (nhóm số).""",
    Subject.VIETNAMESE: """Yêu cầu chuyên môn môn Tiếng Việt (Nâng cao):
- Đọc hiểu và tư duy: câu đố vui dân gian (vẽ hình minh họa), đoán chữ.
- Từ vựng: từ đồng nghĩa, trái nghĩa khó, từ láy, từ ghép.
- Ngữ pháp: sắp xếp câu, tìm lỗi sai trong câu, phân biệt các loại dấu câu.
- Cảm thụ: tìm từ ngữ gợi tả âm thanh, hình ảnh.""",
}

STRICT_SUFFIX = "\n\nQUAN TRỌNG: Chỉ trả về JSON hợp lệ, không markdown, không thêm chữ nào khác."


def build_quiz_prompt(subject: Subject, count: int) -> str:
    guide = _SUBJECT_GUIDES[subject]

    return f"""Bạn là một giáo viên bồi dưỡng học sinh giỏi tiểu học tại Việt Nam.
Hãy tạo một đề thi trắc nghiệm môn {subject.value} trình độ NÂNG CAO cho học sinh lớp 2.

Yêu cầu chung:
1. Số lượng: đúng {count} câu hỏi.
2. Độ khó: KHÁ - GIỎI (nâng cao). Không hỏi các câu cộng trừ quá đơn giản.
3. Mỗi câu hỏi có đúng {OPTION_COUNT} lựa chọn, chỉ một lựa chọn đúng.
4. Trả về JSON thuần túy dạng {{"questions": [...]}} theo schema đã cung cấp.

Yêu cầu về hình ảnh (SVG):
- Khoảng 40-50% số câu hỏi PHẢI có hình minh họa (trường svgImage).
- Hình dạng SVG vector đơn giản, màu sắc tươi sáng.
- Ưu tiên bài toán tư duy hình ảnh (đếm tam giác trong hình ngôi sao, cân thăng bằng, quy luật hình vẽ).

{guide}"""
