# Supabase table: admission_applications
# Database functions: check_submission_rate_limit, get_admission_applications_for_admin

"""
Expected Supabase table structure:

admission_applications:
- id: uuid (primary key)
- student_name, student_id, birth_date, grade: student fields (not null)
- parent_name, parent_phone, parent_email, address: guardian fields (not null)
- previous_school: text (not null)
- gpa: text (nullable)
- special_needs: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Sensitive columns are encrypted at rest. Admins read them through
get_admission_applications_for_admin(), which decrypts server-side.

check_submission_rate_limit(p_email text, p_ip_address text) returns boolean:
true when the submission may proceed.
"""
