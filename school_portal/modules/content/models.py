# Supabase tables: news, activities, media_resources
# Storage buckets: news-images, media-files
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

news:
- id: uuid (primary key)
- title: text (not null)
- content: text (not null)
- author_name: text (not null)
- category: text (default: "ข่าวประชาสัมพันธ์")
- cover_image: text (nullable) - public URL in news-images
- published_date: timestamp (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

activities:
- id: uuid (primary key)
- title: text (not null)
- content: text (not null)
- author_name: text (not null)
- category: text (default: "กิจกรรมภายใน")
- images: text[] (default: '{}') - at most 10 public URLs
- cover_image_index: integer (default: 0)
- cover_image: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

media_resources:
- id: uuid (primary key)
- title: text (not null)
- author_name: text (not null)
- description: text (not null)
- media_url: text (not null)
- media_type: text (not null) - "video", "website", "document", "image"
- thumbnail_url: text (nullable)
- published_date: timestamp (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
