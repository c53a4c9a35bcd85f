"""Prompt templates for form extraction and field value generation."""

import json
from typing import Any, Mapping

from form_scanner.models.form_models import FormType

_FORM_TYPES = "|".join(t.value for t in FormType)

FORM_EXTRACTION_TEMPLATE = """You are an expert HTML form analyzer. Your task is to extract ALL FUNCTIONAL forms from the provided HTML content.

CRITICAL INSTRUCTIONS:
1. Identify ONLY functional forms that can actually submit data (ignore disabled/fake forms)
2. A form can be:
   - Traditional <form> tags with submit buttons
   - DIV-based containers with input fields and submit buttons (no <form> tag)
   - AJAX submissions triggered by JavaScript handlers
   - Multi-step wizards whose steps submit together
   - Contenteditable elements with save buttons (inline editing)
   - Input fields with data attributes and JavaScript submission
   - Hidden forms that appear on trigger
   - Modal forms that popup
   - Forms inside tables
   - Auto-submit forms (no explicit submit button)

3. IGNORE:
   - Forms with ALL disabled fields
   - Decorative/example forms marked as "not functional", "display only", or "demo"
   - Marketing content, testimonials, statistics
   - Image placeholders and fake content
   - Any form explicitly marked as fake or locked

4. The HTML may contain the content of embedded iframes, each introduced by a
   comment of the form <!-- ========== IFRAME n CONTENT: url ========== -->.
   Forms inside iframe content count as forms of the page.

5. For each functional form, extract:
   - Unique identifier (form ID, container ID, or generated ID)
   - Form type
   - CSS selector to locate the form
   - All input fields with their:
     * Field name/identifier
     * Input type (text, email, password, select, textarea, checkbox, radio, etc.)
     * CSS selector to locate the field
     * Whether it's required
     * Validation hints (pattern, min, max, etc.)
     * Placeholder or default value if any
   - Submit mechanism (button selector, auto-submit trigger, etc.)

6. Return results in the following JSON structure:

{{
  "summary": {{
    "totalFunctionalForms": <number>,
    "totalFields": <number>,
    "formsIgnored": <number>,
    "confidence": "high|medium|low"
  }},
  "forms": [
    {{
      "formId": "string (unique identifier)",
      "formType": "{form_types}",
      "selector": "CSS selector to locate this form",
      "submitSelector": "CSS selector for submit button/trigger",
      "submitType": "button-click|auto-submit|enter-key",
      "fields": [
        {{
          "fieldName": "string (name or data attribute)",
          "fieldType": "text|email|password|tel|number|date|select|textarea|checkbox|radio|file|contenteditable|etc",
          "selector": "CSS selector to locate this field",
          "required": boolean,
          "validation": {{
            "pattern": "regex pattern if any",
            "minLength": number,
            "maxLength": number,
            "min": number,
            "max": number,
            "type": "email|url|number|date|etc"
          }},
          "placeholder": "string or null",
          "defaultValue": "string or null",
          "options": ["array of options for select/radio/checkbox"] or null
        }}
      ],
      "specialFeatures": ["array of special characteristics like 'dynamic-fields', 'multi-step', 'conditional', etc"]
    }}
  ]
}}

HTML CONTENT TO ANALYZE:
{html_content}

Return ONLY the JSON response, no additional text or explanation."""


VALUE_GENERATION_TEMPLATE = """You are an expert at generating realistic test data for form submissions. Your task is to generate valid values for all fields in the provided form that will pass ALL validations.

FORM DATA:
{form_json}

INSTRUCTIONS:
1. Generate realistic, valid values for each field
2. Ensure values satisfy ALL validation rules:
   - Required fields must have values
   - Email fields must have valid email format
   - Phone numbers must match expected format
   - Numbers must be within min/max ranges
   - Text must match pattern/regex if specified
   - Dates must be valid and in correct format
   - Passwords must meet strength requirements
   - Select fields must use one of the provided options
   - Checkboxes/radios must use valid values

3. Use realistic data:
   - Real-looking names (e.g., "John Smith", "Emma Johnson")
   - Valid email addresses (e.g., "john.smith@example.com")
   - Proper phone numbers (e.g., "+1-555-123-4567" or "(555) 123-4567")
   - Reasonable dates (not too far in past/future unless specified)
   - Meaningful text content for messages/comments
   - Appropriate selections for dropdowns
   - VARY THE DATA: Use different names, emails, numbers for each form to ensure uniqueness

4. For different field types:
   - text: Use relevant realistic text (3-50 characters unless specified) - VARY THE VALUES
   - email: Use valid email format with DIFFERENT realistic names each time
   - password: Use secure password meeting requirements (e.g., "SecureP@ss123", "MyP@ssw0rd!", "Str0ng#Key")
   - tel: Use valid phone format - RANDOMIZE the numbers
   - number: Use numbers within specified range - RANDOMIZE within range
   - date: Use YYYY-MM-DD format with reasonable dates - VARY the dates
   - time: Use HH:MM format - VARY the times
   - url: Use valid URL format (e.g., "https://example.com", "https://mysite.org")
   - select: Choose first valid option or most appropriate one
   - textarea: Use 2-3 sentences of realistic content - MAKE IT UNIQUE per form
   - checkbox: Use true/false or "checked"/"unchecked"
   - radio: Choose one valid option
   - file: Indicate file type needed (e.g., "image.jpg", "document.pdf", "resume.pdf")
   - contenteditable: Use realistic content matching context - VARY the content

IMPORTANT: Generate UNIQUE, VARIED values for each field. Don't reuse the same name/email/phone across forms.
Use a variety like: "Sarah Johnson", "Michael Chen", "Emily Rodriguez", "James Wilson", "Lisa Anderson", etc.

5. Return the response in this JSON format:

{{
  "formId": "the form identifier",
  "values": {{
    "fieldName1": "generated value",
    "fieldName2": "generated value"
  }},
  "metadata": {{
    "allValidationsSatisfied": boolean,
    "notes": "any special notes about generated values"
  }}
}}

Return ONLY the JSON response, no additional text or explanation."""


def build_form_extraction_prompt(html_content: str) -> str:
    """Prompt asking the model for every functional form in html_content."""
    return FORM_EXTRACTION_TEMPLATE.format(form_types=_FORM_TYPES, html_content=html_content)


def build_value_generation_prompt(form_data: Mapping[str, Any]) -> str:
    """Prompt asking the model for valid values for one form's fields."""
    form_json = json.dumps(dict(form_data), indent=2, ensure_ascii=False)
    return VALUE_GENERATION_TEMPLATE.format(form_json=form_json)
