"""LLM-backed attendance report for a finished or running session."""
import json
import logging
from typing import Dict, List

import requests
from flask import current_app

from attendease.models.attendance import AttendanceRecord
from attendease.models.session import ClassSession

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

MISSING_KEY_REPORT = {
    'summary': "AI service unavailable (Missing API Key).",
    'insights': ["Please configure your API key to see insights."]
}

FAILED_REPORT = {
    'summary': "Failed to generate report.",
    'insights': ["Error connecting to AI service."]
}

class ReportService:
    """Best-effort summary + insights; never raises to the caller."""

    @staticmethod
    def build_prompt(session: ClassSession, records: List[AttendanceRecord], total_students: int) -> str:
        attendance = [{'name': r.student_name, 'time': r.timestamp.isoformat()} for r in records]
        return (
            "Analyze the attendance for the following class session:\n"
            f"Class: {session.class_name}\n"
            f"Topic: {session.topic}\n"
            f"Date: {session.created_at.isoformat()}\n"
            f"Total Enrolled Students: {total_students}\n\n"
            f"Attendance Records:\n{json.dumps(attendance)}\n\n"
            "Please provide:\n"
            "1. A brief summary of the turnout (percentage, timeliness).\n"
            "2. Three key insights or observations (e.g., if students joined late, "
            "or if attendance is low).\n\n"
            "Output JSON format with 'summary' (string) and 'insights' (array of strings)."
        )

    @staticmethod
    def generate_attendance_report(session: ClassSession, records: List[AttendanceRecord],
                                   total_students: int) -> Dict:
        """Return ``{'summary': str, 'insights': [str]}``; fallback text on any failure."""
        api_key = current_app.config.get('GEMINI_API_KEY')
        if not api_key:
            logger.warning("GEMINI_API_KEY is missing, returning fallback report")
            return dict(MISSING_KEY_REPORT)

        body = {
            "generationConfig": {
                "temperature": 0.2,
                "responseMimeType": "application/json",
                "responseSchema": {
                    "type": "OBJECT",
                    "properties": {
                        "summary": {"type": "STRING"},
                        "insights": {"type": "ARRAY", "items": {"type": "STRING"}}
                    }
                }
            },
            "contents": [{
                "role": "user",
                "parts": [{"text": ReportService.build_prompt(session, records, total_students)}]
            }]
        }

        try:
            response = requests.post(
                GEMINI_URL.format(model=current_app.config['GEMINI_MODEL']),
                params={"key": api_key},
                json=body,
                timeout=current_app.config['REPORT_TIMEOUT_SECONDS']
            )
            response.raise_for_status()
            return ReportService.parse_response(response.json())
        except (requests.RequestException, ValueError, KeyError, IndexError,
                TypeError, AttributeError) as e:
            logger.error("Gemini request failed: %s", e)
            return dict(FAILED_REPORT)

    @staticmethod
    def parse_response(data: Dict) -> Dict:
        """Pull the JSON document out of a generateContent response."""
        text = data['candidates'][0]['content']['parts'][0]['text']
        if not text:
            raise ValueError("No response from AI")

        report = json.loads(text)
        summary = report.get('summary')
        insights = report.get('insights') or []
        if not isinstance(summary, str) or not isinstance(insights, list):
            raise ValueError("Unexpected report shape")

        return {'summary': summary, 'insights': [str(item) for item in insights]}
